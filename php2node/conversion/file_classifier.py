# CUI // SP-CTI
"""Classify PHP files into Node.js project roles.

Each role owns a short list of content signatures plus a file-name keyword.
``ROLE_RULES`` is evaluated in order and the first matching role wins, so a
file that looks like both a controller and a config file is a controller.
Files matching nothing are utilities.
"""

import re
from dataclasses import dataclass
from pathlib import PurePath

ROLES = ("controller", "model", "route", "middleware", "config", "util", "view")

TARGET_EXTENSION = ".ts"


@dataclass(frozen=True)
class RoleRule:
    """Content signatures and file-name keyword identifying one role."""
    role: str
    folder: str
    patterns: tuple
    keyword: str
    naming: str = "camel"

    def matches(self, content, file_name):
        if self.keyword in file_name.lower():
            return True
        return any(pattern.search(content) for pattern in self.patterns)


def _compile(*patterns):
    return tuple(re.compile(p) for p in patterns)


# Priority order, first match wins.
ROLE_RULES = (
    RoleRule(
        role="controller",
        folder="controllers",
        patterns=_compile(
            r"class.*Controller",
            r"extends.*Controller",
            r"public function.*\(",
            r"return.*view\(",
            r"return.*json\(",
        ),
        keyword="controller",
    ),
    RoleRule(
        role="model",
        folder="models",
        patterns=_compile(
            r"class.*Model",
            r"extends.*Model",
            r"protected \$table",
            r"protected \$fillable",
            r"public static function",
        ),
        keyword="model",
    ),
    RoleRule(
        role="route",
        folder="routes",
        patterns=_compile(
            r"Route::",
            r"router->",
            r"get\(",
            r"post\(",
            r"put\(",
            r"delete\(",
        ),
        keyword="route",
        naming="kebab",
    ),
    RoleRule(
        role="middleware",
        folder="middlewares",
        patterns=_compile(
            r"middleware",
            r"auth",
            r"validate",
            r"handle\(",
            r"next\(",
        ),
        keyword="middleware",
    ),
    RoleRule(
        role="config",
        folder="config",
        patterns=_compile(
            r"config",
            r"database",
            r"connection",
            r"env",
            r"define\(",
        ),
        keyword="config",
    ),
)

DEFAULT_RULE = RoleRule(role="util", folder="utils", patterns=(), keyword="util")

# Never produced by classify(); kept so a caller-assigned view still gets a path.
VIEW_RULE = RoleRule(role="view", folder="views", patterns=(), keyword="view")

ROLE_PRIORITY = tuple(rule.role for rule in ROLE_RULES) + (DEFAULT_RULE.role,)

_RULES_BY_ROLE = {rule.role: rule for rule in ROLE_RULES + (DEFAULT_RULE, VIEW_RULE)}


@dataclass(frozen=True)
class FileMapping:
    """Where one PHP file lands in the Node.js project."""
    original_path: str
    new_path: str
    role: str

    def to_dict(self):
        return {
            "originalPath": self.original_path,
            "newPath": self.new_path,
            "role": self.role,
        }


def to_camel_case(name):
    """``user_profile-helper`` -> ``userProfileHelper``; leading case is kept."""
    return re.sub(r"[-_\s]+(.)?", lambda m: m.group(1).upper() if m.group(1) else "", name)


def to_kebab_case(name):
    """``UserRoutes`` -> ``user-routes``."""
    return re.sub(r"([a-z])([A-Z])", r"\1-\2", name).lower()


def classify(content, file_name):
    """Return the role of a PHP file from its content and file name."""
    name = PurePath(file_name).stem
    for rule in ROLE_RULES:
        if rule.matches(content, name):
            return rule.role
    return DEFAULT_RULE.role


def output_path(role, file_name):
    """Relative output path (``folder/name.ts``) for a file of ``role``."""
    rule = _RULES_BY_ROLE[role]
    stem = PurePath(file_name).stem
    base = to_kebab_case(stem) if rule.naming == "kebab" else to_camel_case(stem)
    return f"{rule.folder}/{base}{TARGET_EXTENSION}"


def map_file(file_path, content):
    """Build the FileMapping for one PHP file."""
    path = str(file_path)
    role = classify(content, path)
    return FileMapping(original_path=path, new_path=output_path(role, path), role=role)
