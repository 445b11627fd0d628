#!/usr/bin/env python3
# CUI // SP-CTI
"""PHP project conversion orchestrator.

Converts every PHP file of an uploaded project into the Node.js/TypeScript
skeleton under ``<upload_dir>/<project_id>/converted``. Files are handled in
fixed-size chunks: chunks run one after another, the files of one chunk run
concurrently on a ThreadPoolExecutor. A failing file is retried with linear
backoff and then recorded in the failed-files ledger; it never aborts the
project. Progress lives in a ConversionStatusStore owned by the converter.

Usage:
    python -m php2node.conversion.converter --project-id demo
    python -m php2node.conversion.converter --project-id demo --no-ai --json
"""

import argparse
import functools
import json
import logging
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

import yaml

BASE_DIR = Path(__file__).resolve().parent.parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from php2node.conversion.conversion_strategy import BOM, ConversionStrategy  # noqa: E402
from php2node.conversion.file_classifier import FileMapping, ROLE_PRIORITY, map_file  # noqa: E402
from php2node.conversion.project_analyzer import analyze_project  # noqa: E402
from php2node.conversion.project_scaffold import FOLDERS, create_project_structure  # noqa: E402
from php2node.conversion.status_store import ConversionStatusStore  # noqa: E402
from php2node.resilience.errors import ConversionInProgressError, ProjectError  # noqa: E402
from php2node.resilience.retry import call_with_retry, linear_backoff  # noqa: E402

CONFIG_PATH = BASE_DIR / "args" / "conversion_config.yaml"

REVIEWABLE_EXTENSIONS = (".ts", ".js")

logger = logging.getLogger("php2node.conversion.converter")

DEFAULT_CONFIG = {
    "use_ai": True,
    "chunk_size": 5,
    "max_retries": 3,
    "retry_base_delay_seconds": 1.0,
    "upload_dir": "uploads",
    "output_dir_name": "converted",
    "source_extensions": [".php"],
    "exclude_dirs": ["vendor", "node_modules", ".git", "converted"],
}


def _load_config(config_path: Path = CONFIG_PATH) -> dict:
    """Load the ``conversion`` section of args/conversion_config.yaml over defaults."""
    config = dict(DEFAULT_CONFIG)
    if not config_path.exists():
        return config
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read %s: %s - using defaults", config_path, exc)
        return config
    config.update(data.get("conversion", {}) or {})
    return config


def _build_strategy(config):
    delegate = None
    if config["use_ai"]:
        from php2node.conversion.delegate import ConversionDelegate
        delegate = ConversionDelegate()
    return ConversionStrategy(use_ai=config["use_ai"], delegate=delegate)


class PHPConverter:
    """Drives the conversion of whole PHP projects.

    Args:
        upload_dir: Directory holding one sub-directory per project id.
        config: Overrides for the conversion config (see DEFAULT_CONFIG).
        strategy: ConversionStrategy; built from config when omitted.
        status_store: ConversionStatusStore; a private one when omitted.
        sleep: Sleep function used between retries (tests pass a no-op).
    """

    def __init__(self, upload_dir=None, config=None, strategy=None,
                 status_store=None, sleep=None):
        self.config = _load_config() if config is None else {**DEFAULT_CONFIG, **config}
        upload = Path(upload_dir or self.config["upload_dir"])
        self.upload_dir = upload if upload.is_absolute() else BASE_DIR / upload
        self.chunk_size = max(int(self.config["chunk_size"]), 1)
        self.max_retries = max(int(self.config["max_retries"]), 1)
        self.retry_base_delay = float(self.config["retry_base_delay_seconds"])
        self.output_dir_name = self.config["output_dir_name"]
        self.strategy = strategy or _build_strategy(self.config)
        self.status_store = status_store or ConversionStatusStore()
        self._sleep = sleep

        self._lock = threading.Lock()
        self._mappings: Dict[str, List[FileMapping]] = {}
        self._claimed: Dict[str, Dict[str, str]] = {}
        self._threads: Dict[str, threading.Thread] = {}

    # -------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------
    def project_dir(self, project_id) -> Path:
        return self.upload_dir / project_id

    def output_dir(self, project_id) -> Path:
        return self.project_dir(project_id) / self.output_dir_name

    def find_php_files(self, directory) -> List[Path]:
        """All PHP sources under ``directory`` in a stable, sorted order."""
        extensions = {ext.lower() for ext in self.config["source_extensions"]}
        excluded = set(self.config["exclude_dirs"]) | {self.output_dir_name}
        files = []
        for root, dirs, names in os.walk(directory):
            dirs[:] = sorted(d for d in dirs if d not in excluded)
            for name in sorted(names):
                if Path(name).suffix.lower() in extensions:
                    files.append(Path(root) / name)
        logger.debug("Found %d PHP files under %s", len(files), directory)
        return files

    # -------------------------------------------------------------------
    # Public surface
    # -------------------------------------------------------------------
    def start_conversion(self, project_id) -> dict:
        """Validate the project and convert it on a background thread.

        Returns:
            ``{"totalFiles": n}`` as soon as the files are enumerated.

        Raises:
            ConversionInProgressError: The project is already being converted.
            ProjectError: Missing project directory or no PHP files.
        """
        project_dir = self.project_dir(project_id)
        if not project_dir.is_dir():
            raise ProjectError(f"Project directory does not exist: {project_dir}", project_id)
        files = self.find_php_files(project_dir)
        if not files:
            raise ProjectError("No PHP files found in project directory", project_id)

        self._begin(project_id, total_files=len(files))
        thread = threading.Thread(
            target=self._run_in_background,
            args=(project_id,),
            name=f"php2node-convert-{project_id}",
            daemon=True,
        )
        with self._lock:
            self._threads[project_id] = thread
        thread.start()
        logger.info("Conversion started for %s (%d files)", project_id, len(files))
        return {"totalFiles": len(files)}

    def wait(self, project_id, timeout: Optional[float] = None) -> bool:
        """Block until a background conversion finishes. True if it did."""
        with self._lock:
            thread = self._threads.get(project_id)
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def convert_all(self, project_id):
        """Convert a project synchronously and return its final status.

        Raises:
            ConversionInProgressError: The project is already being converted.
            ProjectError: The project could not be converted at all; the
                status record is already in ``error``.
        """
        self._begin(project_id)
        return self._run(project_id)

    def get_status(self, project_id):
        return self.status_store.get(project_id)

    def stop(self, project_id) -> bool:
        """Ask a running conversion to stop before its next chunk.

        Returns True if the project is now stopped.
        """
        record = self.status_store.stop(project_id)
        stopped = record.status == "stopped"
        if stopped:
            logger.info("Stop requested for %s", project_id)
        return stopped

    def build_report(self, project_id) -> dict:
        """Migration report: written files per role, failures, status."""
        if not self.project_dir(project_id).is_dir():
            raise ProjectError(f"Project directory does not exist: {self.project_dir(project_id)}",
                               project_id)
        with self._lock:
            mappings = list(self._mappings.get(project_id, []))

        output_dir = self.output_dir(project_id)
        lines_of_code = 0
        files_by_role = {role: [] for role in ROLE_PRIORITY}
        for mapping in sorted(mappings, key=lambda m: m.original_path):
            files_by_role.setdefault(mapping.role, []).append(
                {"originalPath": mapping.original_path, "newPath": mapping.new_path}
            )
            target = output_dir / mapping.new_path
            if target.is_file():
                lines_of_code += len(target.read_text(encoding="utf-8").splitlines())

        status = self.status_store.get(project_id)
        return {
            "projectId": project_id,
            "status": status.to_dict(),
            "stats": {
                "filesConverted": len(mappings),
                "filesFailed": len(status.failed_files),
                "linesOfCode": lines_of_code,
                "routesCreated": len(files_by_role.get("route", [])),
                "modelsCreated": len(files_by_role.get("model", [])),
            },
            "files": files_by_role,
            "failedFiles": [dict(f) for f in status.failed_files],
        }

    def analyze(self, project_id) -> dict:
        """Static analysis of the uploaded sources (see project_analyzer)."""
        project_dir = self.project_dir(project_id)
        if not project_dir.is_dir():
            raise ProjectError(f"Project directory does not exist: {project_dir}", project_id)
        skip = set(self.config["exclude_dirs"]) | {self.output_dir_name}
        analysis = analyze_project(project_dir, self.find_php_files(project_dir), skip_dirs=skip)
        return analysis.to_dict()

    def converted_files(self, project_id) -> List[dict]:
        """Generated sources in the role folders as ``{name, path}`` entries.

        ``name`` is relative to the output directory, ``path`` to the
        project directory (the form ``read_project_file`` accepts).
        """
        output_dir = self.output_dir(project_id)
        if not output_dir.is_dir():
            raise ProjectError(f"No converted files for project {project_id}", project_id)
        files = []
        for folder in FOLDERS:
            if not (output_dir / folder).is_dir():
                continue
            for path in sorted((output_dir / folder).rglob("*")):
                if path.is_file() and path.suffix in REVIEWABLE_EXTENSIONS:
                    name = path.relative_to(output_dir).as_posix()
                    files.append({"name": name, "path": f"{self.output_dir_name}/{name}"})
        return files

    def read_project_file(self, project_id, relative_path) -> str:
        """Text of one file below the project directory.

        Raises:
            ValueError: ``relative_path`` points outside the project directory.
            FileNotFoundError: There is no such file.
        """
        project_dir = self.project_dir(project_id).resolve()
        target = (project_dir / relative_path).resolve()
        if project_dir not in target.parents:
            raise ValueError(f"Path outside the project directory: {relative_path}")
        if not target.is_file():
            raise FileNotFoundError(relative_path)
        return target.read_text(encoding="utf-8", errors="replace")

    # -------------------------------------------------------------------
    # Conversion run
    # -------------------------------------------------------------------
    def _begin(self, project_id, **fields):
        if self.status_store.create(project_id, **fields) is None:
            raise ConversionInProgressError(
                f"Conversion already in progress for project {project_id}", project_id)

    def _run_in_background(self, project_id):
        try:
            self._run(project_id)
        except ProjectError:
            # Already recorded on the status record and logged.
            pass
        except Exception:
            logger.exception("Conversion thread for %s crashed", project_id)

    def _run(self, project_id):
        store = self.status_store
        try:
            project_dir = self.project_dir(project_id)
            if not project_dir.is_dir():
                raise ProjectError(f"Project directory does not exist: {project_dir}", project_id)

            store.update(project_id, current_step="creating_structure")
            output_dir = self.output_dir(project_id)
            try:
                create_project_structure(output_dir, project_name=project_id)
            except OSError as exc:
                raise ProjectError(f"Failed to create project structure: {exc}", project_id) from exc

            files = self.find_php_files(project_dir)
            if not files:
                raise ProjectError("No PHP files found in project directory", project_id)

            with self._lock:
                self._mappings[project_id] = []
                self._claimed[project_id] = {}
            store.update(project_id, total_files=len(files), current_step="converting")
            self._convert_chunks(project_id, files, project_dir, output_dir)
        except ProjectError as exc:
            logger.error("Conversion failed for project %s: %s", project_id, exc)
            store.fail(project_id, str(exc))
            raise
        except Exception as exc:
            store.fail(project_id, str(exc) or "Conversion failed")
            raise

        if store.is_stopped(project_id):
            logger.info("Conversion stopped for project %s", project_id)
        else:
            store.complete(project_id)
            logger.info("Conversion completed for project %s", project_id)
        return store.get(project_id)

    def _convert_chunks(self, project_id, files, project_dir, output_dir):
        chunks = [files[i:i + self.chunk_size] for i in range(0, len(files), self.chunk_size)]
        with ThreadPoolExecutor(max_workers=self.chunk_size) as executor:
            for index, chunk in enumerate(chunks, start=1):
                if self.status_store.is_stopped(project_id):
                    logger.info("Stop honoured for %s before chunk %d of %d",
                                project_id, index, len(chunks))
                    return
                logger.info("Processing chunk %d of %d (%d files)", index, len(chunks), len(chunk))
                futures = {
                    executor.submit(self._settle_file, project_id, path, project_dir, output_dir): path
                    for path in chunk
                }
                # Completion order inside a chunk is unspecified.
                for future in as_completed(futures):
                    future.result()

    def _settle_file(self, project_id, file_path, project_dir, output_dir):
        """Convert one file with retries, then count it as settled."""
        rel_path = file_path.relative_to(project_dir).as_posix()
        try:
            mapping = call_with_retry(
                functools.partial(self._convert_file, project_id, file_path, rel_path, output_dir),
                max_attempts=self.max_retries,
                base_delay=self.retry_base_delay,
                delay_fn=linear_backoff,
                sleep=self._sleep,
            )
        except Exception as exc:
            # File-level failure: recorded, never escalated to the project.
            message = f"Failed to convert {rel_path} after {self.max_retries} attempts: {exc}"
            logger.warning(message)
            self.status_store.file_settled(project_id, failure={"file": rel_path, "error": str(exc)})
            return None

        with self._lock:
            self._mappings.setdefault(project_id, []).append(mapping)
        self.status_store.file_settled(project_id)
        return mapping

    def _convert_file(self, project_id, file_path, rel_path, output_dir):
        """One attempt: read, convert, classify, write."""
        content = file_path.read_text(encoding="utf-8").lstrip(BOM)
        converted = self.strategy.convert_one(content, file_name=rel_path)

        mapping = map_file(rel_path, content)
        new_path = self._claim_output_path(project_id, rel_path, mapping.new_path)
        mapping = FileMapping(original_path=rel_path, new_path=new_path, role=mapping.role)

        target = output_dir / new_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(converted, encoding="utf-8")
        logger.info("Converted %s -> %s (%s)", rel_path, new_path, mapping.role)
        return mapping

    def _claim_output_path(self, project_id, rel_path, new_path):
        """Reserve ``new_path`` for ``rel_path``; later claimants get foo2.ts, foo3.ts ..."""
        with self._lock:
            claimed = self._claimed.setdefault(project_id, {})
            for path, owner in claimed.items():
                if owner == rel_path:
                    return path
            candidate = new_path
            stem, dot, ext = new_path.rpartition(".")
            counter = 2
            while candidate in claimed:
                candidate = f"{stem}{counter}{dot}{ext}"
                counter += 1
            claimed[candidate] = rel_path
            return candidate


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def main():
    """CLI: convert one uploaded project synchronously."""
    parser = argparse.ArgumentParser(
        description="php2node converter - convert an uploaded PHP project to Node.js/TypeScript"
    )
    parser.add_argument("--project-id", required=True, help="Project directory name under the upload dir")
    parser.add_argument("--upload-dir", help="Override conversion.upload_dir")
    parser.add_argument("--no-ai", action="store_true", help="Use only the local AST conversion")
    parser.add_argument("--chunk-size", type=int, help="Files converted concurrently per chunk")
    parser.add_argument("--max-retries", type=int, help="Attempts per file before it is recorded as failed")
    parser.add_argument("--json", action="store_true", help="Output the migration report as JSON")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    config = _load_config()
    if args.no_ai:
        config["use_ai"] = False
    if args.chunk_size:
        config["chunk_size"] = args.chunk_size
    if args.max_retries:
        config["max_retries"] = args.max_retries

    converter = PHPConverter(upload_dir=args.upload_dir, config=config)
    try:
        converter.convert_all(args.project_id)
    except ProjectError as exc:
        print(f"Conversion failed: {exc}", file=sys.stderr)
        sys.exit(1)

    report = converter.build_report(args.project_id)
    if args.json:
        print(json.dumps(report, indent=2, default=str))
        return

    stats = report["stats"]
    print(f"Project: {args.project_id}")
    print(f"Status: {report['status']['status']}")
    print(f"Converted: {stats['filesConverted']}  Failed: {stats['filesFailed']}")
    print(f"Lines of code: {stats['linesOfCode']}")
    print()
    for role, entries in report["files"].items():
        for entry in entries:
            print(f"  [{role}] {entry['originalPath']} -> {entry['newPath']}")
    for failure in report["failedFiles"]:
        print(f"  [failed] {failure['file']}: {failure['error']}")


if __name__ == "__main__":
    main()
