#!/usr/bin/env python3
# CUI // SP-CTI
"""php2node HTTP status surface.

Endpoints:
    GET  /api/health                        -- liveness and circuit breaker states
    POST /api/convert/all                   -- start a project conversion
    GET  /api/convert/status/<project_id>   -- poll conversion status
    POST /api/convert/stop/<project_id>     -- request a cooperative stop
    POST /api/analyze                       -- static analysis of a project
    GET  /api/review/files/<project_id>     -- list converted files
    GET  /api/review/file/<project_id>/<p>  -- read one project file
    GET  /api/review/report/<project_id>    -- migration report
    POST /api/convert                       -- convert one PHP snippet

The PHPConverter (and therefore its status store) is injected through
``create_app(converter=...)``; handlers reach it via ``current_app``.

Usage:
    python -m php2node.api.conversion_api --port 3001
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from flask import Blueprint, Flask, current_app, jsonify, request  # noqa: E402

from php2node.resilience.circuit_breaker import get_all_breakers  # noqa: E402
from php2node.resilience.errors import ConversionInProgressError, ProjectError  # noqa: E402

logger = logging.getLogger("php2node.api.conversion_api")

CONVERTER_KEY = "PHP2NODE_CONVERTER"
DEFAULT_PORT = 3001

conversion_bp = Blueprint("conversion", __name__, url_prefix="/api")


def _converter():
    return current_app.config[CONVERTER_KEY]


def _valid_project_id(project_id):
    # Project ids are single directory names under the upload dir.
    return bool(project_id) and project_id not in ("undefined", ".", "..") \
        and "/" not in project_id and "\\" not in project_id


@conversion_bp.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "circuitBreakers": get_all_breakers(),
    })


@conversion_bp.route("/convert/all", methods=["POST"])
def convert_all():
    """Start converting a whole project in the background."""
    body = request.get_json(silent=True) or {}
    project_id = body.get("projectId")
    if not project_id:
        return jsonify({"error": "Project ID is required"}), 400
    if not _valid_project_id(project_id):
        return jsonify({"error": "Invalid project ID"}), 400

    converter = _converter()
    if not converter.project_dir(project_id).is_dir():
        return jsonify({"error": "Project directory not found"}), 404

    try:
        started = converter.start_conversion(project_id)
    except ConversionInProgressError as exc:
        return jsonify({"error": "Conversion already in progress", "details": str(exc)}), 409
    except ProjectError as exc:
        return jsonify({"error": "No PHP files found in the project", "details": str(exc)}), 400

    return jsonify({
        "message": "Conversion started",
        "projectId": project_id,
        "totalFiles": started["totalFiles"],
    })


@conversion_bp.route("/convert/status/<project_id>", methods=["GET"])
def conversion_status(project_id):
    return jsonify(_converter().get_status(project_id).to_dict())


@conversion_bp.route("/convert/stop/<project_id>", methods=["POST"])
def stop_conversion(project_id):
    stopped = _converter().stop(project_id)
    message = "Conversion stopped" if stopped else "Conversion already finished"
    return jsonify({"message": message, "projectId": project_id})


@conversion_bp.route("/analyze", methods=["POST"])
def analyze():
    """Static analysis of an uploaded project before conversion."""
    body = request.get_json(silent=True) or {}
    project_id = body.get("projectId")
    if not project_id:
        return jsonify({"error": "Project ID is required"}), 400
    if not _valid_project_id(project_id):
        return jsonify({"error": "Invalid project ID"}), 400
    try:
        analysis = _converter().analyze(project_id)
    except ProjectError:
        return jsonify({"error": "Project not found"}), 404
    return jsonify({"projectId": project_id, **analysis})


@conversion_bp.route("/review/files/<project_id>", methods=["GET"])
def review_files(project_id):
    if not _valid_project_id(project_id):
        return jsonify({"error": "Invalid project ID"}), 400
    try:
        files = _converter().converted_files(project_id)
    except ProjectError:
        return jsonify({"error": "No converted files found"}), 404
    return jsonify({"files": files})


@conversion_bp.route("/review/file/<project_id>/<path:file_path>", methods=["GET"])
def review_file(project_id, file_path):
    """Read-only view of one file inside the project directory."""
    if not _valid_project_id(project_id):
        return jsonify({"error": "Invalid project ID"}), 400
    try:
        content = _converter().read_project_file(project_id, file_path)
    except ValueError:
        return jsonify({"error": "Invalid file path"}), 400
    except FileNotFoundError:
        return jsonify({"error": "File not found"}), 404
    return jsonify({"content": content})


@conversion_bp.route("/review/report/<project_id>", methods=["GET"])
def migration_report(project_id):
    if not _valid_project_id(project_id):
        return jsonify({"error": "Invalid project ID"}), 400
    try:
        report = _converter().build_report(project_id)
    except ProjectError:
        return jsonify({"error": "Project directory not found"}), 404
    return jsonify(report)


@conversion_bp.route("/convert", methods=["POST"])
def convert_snippet():
    """Convert a single PHP snippet synchronously."""
    body = request.get_json(silent=True) or {}
    code = body.get("code")
    if not isinstance(code, str) or not code.strip():
        return jsonify({"error": "No code provided. Expected field: code"}), 400
    file_name = body.get("fileName") or "snippet.php"
    result = _converter().strategy.convert_source(code, file_name)
    return jsonify(result.to_dict())


def _register_error_handlers(app):
    """Register global JSON error handlers."""

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(exc):
        logger.error("Internal server error: %s", exc)
        return jsonify({"error": "Internal server error"}), 500


def create_app(converter=None, config=None):
    """Flask application factory.

    Args:
        converter: PHPConverter to serve; one is built from
            args/conversion_config.yaml when omitted.
        config: Optional dict of Flask configuration overrides.
    """
    app = Flask(__name__)
    app.config["JSON_SORT_KEYS"] = False
    if config:
        app.config.update(config)

    if converter is None:
        from php2node.conversion.converter import PHPConverter
        converter = PHPConverter()
    app.config[CONVERTER_KEY] = converter

    app.register_blueprint(conversion_bp)
    _register_error_handlers(app)
    logger.info("php2node API ready (uploads: %s)", converter.upload_dir)
    return app


def main():
    """Run the development server."""
    parser = argparse.ArgumentParser(description="php2node conversion API")
    parser.add_argument(
        "--port", type=int,
        default=int(os.environ.get("PORT", str(DEFAULT_PORT))),
        help="Port to listen on (default: {}, env: PORT)".format(DEFAULT_PORT),
    )
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"))
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    create_app().run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
