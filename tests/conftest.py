#!/usr/bin/env python3
# CUI // SP-CTI
"""Shared pytest fixtures for the php2node test suite."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure project root is on sys.path
BASE_DIR = Path(__file__).resolve().parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from php2node.resilience.circuit_breaker import _registry, _registry_lock  # noqa: E402


SIMPLE_PHP = "<?php\necho 'hello';\n"


@pytest.fixture(autouse=True)
def _clear_breakers():
    """Every test starts with an empty circuit breaker registry."""
    with _registry_lock:
        _registry.clear()
    yield
    with _registry_lock:
        _registry.clear()


@pytest.fixture
def no_sleep():
    """Sleep stand-in that records requested delays."""
    return MagicMock(return_value=None)


@pytest.fixture
def make_project(tmp_path):
    """Create ``uploads/<project_id>`` with the given {relative path: content} files."""

    def _make(files, project_id="demo"):
        upload_dir = tmp_path / "uploads"
        project_dir = upload_dir / project_id
        project_dir.mkdir(parents=True, exist_ok=True)
        for rel_path, content in files.items():
            target = project_dir / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return upload_dir, project_dir

    return _make
