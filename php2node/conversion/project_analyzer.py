# CUI // SP-CTI
"""Static pre-conversion analysis of an uploaded PHP project.

Reports which files the converter will treat as routes, controllers and
models (the same role rules ``file_classifier`` applies during a run), the
authentication style and database layer the code relies on, the composer
dependencies, a size-based complexity rating and the project file tree.
Everything is derived from the files on disk; no remote service is called.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from php2node.conversion.file_classifier import classify

logger = logging.getLogger("php2node.conversion.project_analyzer")

# Checked in order; the first signature seen anywhere in the project wins.
AUTH_SIGNATURES = (
    ("laravel", re.compile(r"Auth::|auth\(\)->")),
    ("session", re.compile(r"session_start\(\)")),
)

DATABASE_SIGNATURES = (
    ("mysql", re.compile(r"DB::|Eloquent")),
    ("pdo", re.compile(r"\bPDO\b")),
    ("mysqli", re.compile(r"\bmysqli")),
)

# (minimum total lines, rating), largest first.
COMPLEXITY_LEVELS = ((10000, "high"), (5000, "medium"))

PURPOSE_KEYWORDS = (
    ("api", "API Service"),
    ("admin", "Admin Panel"),
    ("auth", "Authentication System"),
)

STRUCTURE_ROLES = {"route": "routes", "controller": "controllers", "model": "models"}


@dataclass
class ProjectAnalysis:
    routes: List[str] = field(default_factory=list)
    controllers: List[str] = field(default_factory=list)
    models: List[str] = field(default_factory=list)
    auth_type: str = "none"
    database: str = "unknown"
    purpose: str = "Unknown"
    dependencies: List[str] = field(default_factory=list)
    complexity: str = "low"
    php_files: int = 0
    total_lines: int = 0
    file_tree: List[dict] = field(default_factory=list)

    def to_dict(self):
        return {
            "structure": {
                "routes": list(self.routes),
                "controllers": list(self.controllers),
                "models": list(self.models),
                "authType": self.auth_type,
                "database": self.database,
            },
            "summary": {
                "purpose": self.purpose,
                "dependencies": list(self.dependencies),
                "complexity": self.complexity,
                "phpFiles": self.php_files,
                "totalLines": self.total_lines,
            },
            "fileTree": self.file_tree,
        }


def rate_complexity(total_lines):
    for threshold, rating in COMPLEXITY_LEVELS:
        if total_lines > threshold:
            return rating
    return "low"


def guess_purpose(relative_paths):
    """Coarse project purpose from directory and file names."""
    lowered = [p.lower() for p in relative_paths]
    for keyword, purpose in PURPOSE_KEYWORDS:
        if any(keyword in p for p in lowered):
            return purpose
    return "Unknown"


def _first_signature(signatures, contents, default):
    for name, pattern in signatures:
        if any(pattern.search(text) for text in contents):
            return name
    return default


def composer_dependencies(project_dir):
    """Package names from the ``require`` block of composer.json."""
    composer = Path(project_dir) / "composer.json"
    if not composer.is_file():
        return []
    try:
        data = json.loads(composer.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", composer, exc)
        return []
    require = data.get("require") if isinstance(data, dict) else None
    return sorted(require) if isinstance(require, dict) else []


def file_tree(directory, skip_dirs=(), base=""):
    """Nested ``{name, type, path[, children]}`` nodes, folders first."""
    directory = Path(directory)
    entries = sorted(directory.iterdir(), key=lambda p: (not p.is_dir(), p.name))
    tree = []
    for entry in entries:
        rel_path = f"{base}/{entry.name}" if base else entry.name
        if entry.is_dir():
            if entry.name in skip_dirs:
                continue
            tree.append({
                "name": entry.name,
                "type": "folder",
                "path": rel_path,
                "children": file_tree(entry, skip_dirs, rel_path),
            })
        else:
            tree.append({"name": entry.name, "type": "file", "path": rel_path})
    return tree


def analyze_project(project_dir, php_files, skip_dirs=()):
    """Analyze ``php_files`` (absolute paths below ``project_dir``).

    Files that cannot be read as UTF-8 are still counted and listed in the
    tree; they are left out of the content-based detection.
    """
    project_dir = Path(project_dir)
    analysis = ProjectAnalysis(php_files=len(php_files))
    contents: List[str] = []
    rel_paths: List[str] = []

    for file_path in php_files:
        rel_path = Path(file_path).relative_to(project_dir).as_posix()
        rel_paths.append(rel_path)
        try:
            text = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping %s during analysis: %s", rel_path, exc)
            continue
        contents.append(text)
        analysis.total_lines += len(text.splitlines())
        bucket = STRUCTURE_ROLES.get(classify(text, rel_path))
        if bucket:
            getattr(analysis, bucket).append(rel_path)

    analysis.auth_type = _first_signature(AUTH_SIGNATURES, contents, "none")
    analysis.database = _first_signature(DATABASE_SIGNATURES, contents, "unknown")
    analysis.purpose = guess_purpose(rel_paths)
    analysis.dependencies = composer_dependencies(project_dir)
    analysis.complexity = rate_complexity(analysis.total_lines)
    analysis.file_tree = file_tree(project_dir, skip_dirs=set(skip_dirs))
    logger.info(
        "Analyzed %s: %d PHP files, %d lines, %d routes, %d controllers, %d models",
        project_dir.name, analysis.php_files, analysis.total_lines,
        len(analysis.routes), len(analysis.controllers), len(analysis.models),
    )
    return analysis
