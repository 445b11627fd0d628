# CUI // SP-CTI
"""PHP -> JavaScript operator mapping tables.

Two finite maps: arithmetic / comparison operators and logical operators.
Unknown symbols fall back to a syntactically safe default (``+`` / ``&&``)
and are logged, so the emitted code stays parseable while the gap is
visible in the conversion log.
"""

import logging

logger = logging.getLogger("php2node.conversion.operator_map")

BINARY_OPERATORS = {
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "%": "%",
    "==": "==",
    "===": "===",
    "!=": "!=",
    "!==": "!==",
    "<": "<",
    ">": ">",
    "<=": "<=",
    ">=": ">=",
    ".": "+",  # string concatenation
}

LOGICAL_OPERATORS = {
    "&&": "&&",
    "||": "||",
}

DEFAULT_BINARY_OPERATOR = "+"
DEFAULT_LOGICAL_OPERATOR = "&&"


def is_logical(operator):
    """True when ``operator`` belongs to the logical table."""
    return operator in LOGICAL_OPERATORS


def map_binary_operator(operator):
    """Map a PHP arithmetic/comparison operator to its JavaScript form."""
    mapped = BINARY_OPERATORS.get(operator)
    if mapped is None:
        logger.warning(
            "Unknown binary operator %r; defaulting to %r",
            operator, DEFAULT_BINARY_OPERATOR,
        )
        return DEFAULT_BINARY_OPERATOR
    return mapped


def map_logical_operator(operator):
    """Map a PHP logical operator to its JavaScript form."""
    mapped = LOGICAL_OPERATORS.get(operator)
    if mapped is None:
        logger.warning(
            "Unknown logical operator %r; defaulting to %r",
            operator, DEFAULT_LOGICAL_OPERATOR,
        )
        return DEFAULT_LOGICAL_OPERATOR
    return mapped
