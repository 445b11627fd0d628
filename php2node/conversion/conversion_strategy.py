# CUI // SP-CTI
"""Two-tier conversion strategy.

The remote delegate is tried first when AI mode is on; any delegate failure
or empty reply falls back to the deterministic local path (phply parse,
AST transform, print). The plausibility check on the result only logs.
"""

import logging
import re
from dataclasses import asdict, dataclass

from php2node.conversion.ast_transformer import transform
from php2node.conversion.code_printer import print_code
from php2node.conversion.php_parser import PhpParser
from php2node.resilience.errors import Php2NodeError, PhpParseError

logger = logging.getLogger("php2node.conversion.conversion_strategy")

PROMPT_TEMPLATE = (
    "Convert the following PHP code to idiomatic Node.js/Express.js code.\n"
    "Include proper error handling, async/await patterns, and modern JavaScript practices.\n\n"
    "PHP code:\n{code}"
)

# Tried in order; the first fence found wins.
FENCE_PATTERNS = (
    re.compile(r"```typescript\n([\s\S]*?)\n```"),
    re.compile(r"```javascript\n([\s\S]*?)\n```"),
    re.compile(r"```ts\n([\s\S]*?)\n```"),
    re.compile(r"```js\n([\s\S]*?)\n```"),
    re.compile(r"```\n([\s\S]*?)\n```"),
)

CODE_PATTERNS = (
    re.compile(r"function\s+\w+\s*\("),
    re.compile(r"const\s+\w+\s*="),
    re.compile(r"let\s+\w+\s*="),
    re.compile(r"var\s+\w+\s*="),
    re.compile(r"import\s+"),
    re.compile(r"export\s+"),
    re.compile(r"class\s+\w+"),
    re.compile(r"interface\s+\w+"),
    re.compile(r"console\.log"),
    re.compile(r"return\s+"),
    re.compile(r"if\s*\("),
    re.compile(r"for\s*\("),
    re.compile(r"while\s*\("),
)

MIN_CODE_LENGTH = 10
PHP_OPEN_TAG = "<?php"
BOM = "\ufeff"


@dataclass
class ConversionResult:
    """Outcome of converting one snippet or file."""
    file: str
    success: bool
    result: str

    def to_dict(self):
        return asdict(self)


def build_prompt(code):
    return PROMPT_TEMPLATE.format(code=code)


def extract_code(response):
    """Strip the first recognised code fence, else return the trimmed reply."""
    for pattern in FENCE_PATTERNS:
        match = pattern.search(response)
        if match:
            return match.group(1).strip()
    return response.strip()


def is_valid_code(content):
    """Cheap surface check that ``content`` looks like JS/TS source."""
    trimmed = content.strip()
    if len(trimmed) < MIN_CODE_LENGTH:
        return False
    return any(pattern.search(trimmed) for pattern in CODE_PATTERNS)


class ConversionStrategy:
    """Delegate-first, local-fallback converter for one PHP source text."""

    def __init__(self, use_ai=True, delegate=None, parser=None):
        self.use_ai = use_ai
        self._delegate = delegate
        self._parser = parser or PhpParser()

    def convert_one(self, source_text, file_name=""):
        """Return JavaScript text for one PHP source text.

        Raises:
            PhpParseError: The local fallback could not parse the source.
        """
        if self.use_ai and self._delegate is not None:
            try:
                reply = self._delegate.complete(build_prompt(source_text))
            except Php2NodeError as exc:
                logger.warning(
                    "Delegate conversion failed for %s (%s: %s); falling back to AST transformation",
                    file_name or "<snippet>", type(exc).__name__, exc,
                )
            else:
                code = extract_code(reply)
                if code:
                    self._check(code, file_name)
                    return code
                logger.warning(
                    "Delegate returned no code for %s; falling back to AST transformation",
                    file_name or "<snippet>",
                )

        code = self.convert_locally(source_text, file_name)
        self._check(code, file_name)
        return code

    def convert_locally(self, source_text, file_name=""):
        """Deterministic path: parse, transform, print."""
        program = self._parser.parse(source_text, file_name=file_name)
        return print_code(transform(program))

    def convert_source(self, code, file_name):
        """Convert a standalone snippet, reporting failure instead of raising."""
        clean = code.lstrip(BOM).strip()
        try:
            if not clean.startswith(PHP_OPEN_TAG):
                raise PhpParseError("PHP file must start with <?php", file_name=file_name)
            # Reject unparseable input up front, even when the delegate would accept it.
            self._parser.parse(clean, file_name=file_name)
            result = self.convert_one(clean, file_name)
        except PhpParseError as exc:
            logger.warning("Failed to parse PHP file %s: %s", file_name, exc)
            return ConversionResult(file=file_name, success=False,
                                    result=f"Failed to parse PHP file: {exc}")
        return ConversionResult(file=file_name, success=True, result=result)

    @staticmethod
    def _check(code, file_name):
        if not is_valid_code(code):
            logger.warning(
                "Converted content for %s may not be valid code: %.200s",
                file_name or "<snippet>", code,
            )
