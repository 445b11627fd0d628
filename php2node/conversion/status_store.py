# CUI // SP-CTI
"""Per-project conversion status store.

Records are immutable snapshots replaced whole under a lock, so two files
finishing at once inside a chunk cannot lose each other's update. Progress
never decreases, and a terminal record (completed, error, stopped) is
never changed again until the project is cleared.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

logger = logging.getLogger("php2node.conversion.status_store")

IN_PROGRESS = "in_progress"
COMPLETED = "completed"
ERROR = "error"
STOPPED = "stopped"

TERMINAL_STATUSES = frozenset({COMPLETED, ERROR, STOPPED})


@dataclass(frozen=True)
class ConversionStatus:
    status: str = IN_PROGRESS
    progress: int = 0
    current_step: str = "initializing"
    completed_files: int = 0
    total_files: int = 0
    error: Optional[str] = None
    failed_files: List[dict] = field(default_factory=list)

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def to_dict(self):
        return {
            "status": self.status,
            "progress": self.progress,
            "currentStep": self.current_step,
            "completedFiles": self.completed_files,
            "totalFiles": self.total_files,
            "error": self.error,
            "failedFiles": [dict(f) for f in self.failed_files],
        }


def compute_progress(completed_files, total_files):
    """Whole-number percentage, held at 99 until the run is marked completed."""
    if total_files <= 0:
        return 0
    return min(completed_files * 100 // total_files, 99)


class ConversionStatusStore:
    """Thread-safe map of project id -> ConversionStatus."""

    def __init__(self):
        self._records: Dict[str, ConversionStatus] = {}
        self._lock = threading.Lock()

    def create(self, project_id, **fields):
        """Start a fresh record for ``project_id``.

        A terminal record is replaced. Returns None, leaving the store
        untouched, while a non-terminal record exists.
        """
        with self._lock:
            current = self._records.get(project_id)
            if current is not None and not current.is_terminal:
                return None
            record = ConversionStatus(**fields)
            self._records[project_id] = record
            return record

    def get(self, project_id):
        """Current record, or a synthesized initializing one."""
        with self._lock:
            record = self._records.get(project_id)
        return record if record is not None else ConversionStatus()

    def has(self, project_id):
        with self._lock:
            return project_id in self._records

    def update(self, project_id, **changes):
        """Merge ``changes`` into the record; terminal records are left alone."""
        with self._lock:
            current = self._records.get(project_id)
            if current is None:
                current = ConversionStatus()
            if current.is_terminal:
                logger.debug("Ignoring update for %s: status already %s", project_id, current.status)
                return current
            record = self._merge(current, changes)
            self._records[project_id] = record
            return record

    def file_settled(self, project_id, failure=None):
        """Count one more settled file and recompute progress atomically.

        ``failure`` is an optional ``{"file": ..., "error": ...}`` entry for
        the failed-files ledger.
        """
        with self._lock:
            current = self._records.get(project_id, ConversionStatus())
            if current.is_terminal:
                return current
            completed = current.completed_files + 1
            changes = {
                "completed_files": completed,
                "progress": compute_progress(completed, current.total_files),
            }
            if failure is not None:
                changes["failed_files"] = current.failed_files + [dict(failure)]
            record = self._merge(current, changes)
            self._records[project_id] = record
            return record

    def complete(self, project_id):
        return self.update(project_id, status=COMPLETED, progress=100, current_step=COMPLETED)

    def fail(self, project_id, message):
        return self.update(project_id, status=ERROR, current_step=ERROR, error=message)

    def stop(self, project_id, message="Conversion stopped by user"):
        """Force a non-terminal record into ``stopped``.

        An unknown project gets a stopped snapshot back but nothing is stored.
        """
        changes = {"status": STOPPED, "current_step": STOPPED, "error": message}
        with self._lock:
            if project_id not in self._records:
                return ConversionStatus(**changes)
        return self.update(project_id, **changes)

    def is_stopped(self, project_id):
        return self.get(project_id).status == STOPPED

    def clear(self, project_id=None):
        """Forget one project, or every project when no id is given."""
        with self._lock:
            if project_id is None:
                self._records.clear()
            else:
                self._records.pop(project_id, None)

    @staticmethod
    def _merge(current, changes):
        if "progress" in changes:
            progress = changes["progress"]
            if changes.get("status") != COMPLETED:
                progress = min(progress, 99)
            changes = dict(changes, progress=max(current.progress, progress))
        return replace(current, **changes)
