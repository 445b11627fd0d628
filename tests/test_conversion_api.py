# CUI // SP-CTI
"""Tests for php2node.api.conversion_api (Flask status surface)."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from php2node.api.conversion_api import create_app
from php2node.conversion.conversion_strategy import ConversionStrategy
from php2node.conversion.converter import PHPConverter
from php2node.resilience.circuit_breaker import get_circuit_breaker

PHP = "<?php\necho 'hello';\n"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def converter(upload_dir, no_sleep):
    return PHPConverter(
        upload_dir=upload_dir,
        config={"use_ai": False, "chunk_size": 5, "max_retries": 1},
        strategy=ConversionStrategy(use_ai=False),
        sleep=no_sleep,
    )


@pytest.fixture
def client(converter):
    app = create_app(converter=converter, config={"TESTING": True})
    return app.test_client()


def _project(upload_dir, project_id="demo", files=None):
    project_dir = upload_dir / project_id
    project_dir.mkdir()
    for name, content in (files or {"index.php": PHP}).items():
        (project_dir / name).write_text(content, encoding="utf-8")
    return project_dir


# ---------------------------------------------------------------------------
# Health and routing
# ---------------------------------------------------------------------------
class TestHealth:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert "timestamp" in data

    def test_health_reports_circuit_breakers(self, client):
        breaker = get_circuit_breaker("conversion_delegate")
        for _ in range(breaker.failure_threshold):
            breaker.record_failure()
        data = client.get("/api/health").get_json()
        assert data["circuitBreakers"]["conversion_delegate"]["state"] == "open"

    def test_unknown_route_is_json_404(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}

    def test_wrong_method_is_json_405(self, client):
        resp = client.get("/api/convert/all")
        assert resp.status_code == 405


# ---------------------------------------------------------------------------
# Project conversion
# ---------------------------------------------------------------------------
class TestConvertAll:

    def test_requires_project_id(self, client):
        resp = client.post("/api/convert/all", json={})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Project ID is required"

    @pytest.mark.parametrize("project_id", ["undefined", "..", "a/b"])
    def test_rejects_invalid_project_id(self, client, project_id):
        resp = client.post("/api/convert/all", json={"projectId": project_id})
        assert resp.status_code == 400

    def test_missing_project_directory(self, client):
        resp = client.post("/api/convert/all", json={"projectId": "ghost"})
        assert resp.status_code == 404

    def test_project_without_php_files(self, client, upload_dir):
        _project(upload_dir, files={"readme.txt": "hi"})
        resp = client.post("/api/convert/all", json={"projectId": "demo"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "No PHP files found in the project"

    def test_second_start_while_running_is_409(self, client, converter, upload_dir):
        _project(upload_dir)
        converter.status_store.create("demo", total_files=4)
        converter.status_store.file_settled("demo")
        resp = client.post("/api/convert/all", json={"projectId": "demo"})
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Conversion already in progress"
        status = client.get("/api/convert/status/demo").get_json()
        assert status["completedFiles"] == 1
        assert status["totalFiles"] == 4

    def test_start_then_poll_until_completed(self, client, converter, upload_dir):
        _project(upload_dir, files={"a.php": PHP, "b.php": PHP})

        resp = client.post("/api/convert/all", json={"projectId": "demo"})
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Conversion started", "projectId": "demo", "totalFiles": 2}

        assert converter.wait("demo", timeout=10)
        status = client.get("/api/convert/status/demo").get_json()
        assert status["status"] == "completed"
        assert status["progress"] == 100
        assert status["completedFiles"] == 2
        assert status["totalFiles"] == 2
        assert status["failedFiles"] == []


class TestStatusAndStop:

    def test_unknown_project_status(self, client):
        data = client.get("/api/convert/status/never").get_json()
        assert data["status"] == "in_progress"
        assert data["currentStep"] == "initializing"
        assert data["progress"] == 0

    def test_stop_running_project(self, client, converter):
        converter.status_store.create("demo", total_files=3)
        resp = client.post("/api/convert/stop/demo")
        assert resp.get_json() == {"message": "Conversion stopped", "projectId": "demo"}
        data = client.get("/api/convert/status/demo").get_json()
        assert data["status"] == "stopped"
        assert data["error"] == "Conversion stopped by user"

    def test_stop_unknown_project_leaves_no_record(self, client, converter):
        resp = client.post("/api/convert/stop/never")
        assert resp.get_json() == {"message": "Conversion stopped", "projectId": "never"}
        assert not converter.status_store.has("never")
        assert client.get("/api/convert/status/never").get_json()["status"] == "in_progress"

    def test_stop_finished_project(self, client, converter):
        converter.status_store.create("demo", total_files=1)
        converter.status_store.complete("demo")
        resp = client.post("/api/convert/stop/demo")
        assert resp.get_json()["message"] == "Conversion already finished"
        assert client.get("/api/convert/status/demo").get_json()["status"] == "completed"


# ---------------------------------------------------------------------------
# Analysis and review
# ---------------------------------------------------------------------------
class TestAnalyze:

    def test_requires_project_id(self, client):
        assert client.post("/api/analyze", json={}).status_code == 400

    def test_missing_project(self, client):
        resp = client.post("/api/analyze", json={"projectId": "ghost"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Project not found"}

    def test_analysis_of_uploaded_project(self, client, upload_dir):
        _project(upload_dir, files={
            "UserController.php": "<?php class UserController extends Controller {}\n",
            "index.php": PHP,
        })
        data = client.post("/api/analyze", json={"projectId": "demo"}).get_json()
        assert data["projectId"] == "demo"
        assert data["structure"]["controllers"] == ["UserController.php"]
        assert data["summary"]["phpFiles"] == 2
        assert [node["name"] for node in data["fileTree"]] == ["UserController.php", "index.php"]


class TestReviewFiles:

    def test_lists_converted_sources(self, client, converter, upload_dir):
        _project(upload_dir)
        converter.convert_all("demo")
        files = client.get("/api/review/files/demo").get_json()["files"]
        names = [f["name"] for f in files]
        assert "utils/index.ts" in names
        assert "config/database.ts" in names
        assert "index.ts" not in names
        assert {"name": "utils/index.ts", "path": "converted/utils/index.ts"} in files

    def test_not_converted_yet(self, client, upload_dir):
        _project(upload_dir)
        resp = client.get("/api/review/files/demo")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "No converted files found"}

    def test_reads_converted_file(self, client, converter, upload_dir):
        _project(upload_dir)
        converter.convert_all("demo")
        resp = client.get("/api/review/file/demo/converted/utils/index.ts")
        assert resp.status_code == 200
        assert resp.get_json() == {"content": "console.log('hello');\n"}

    def test_missing_file(self, client, upload_dir):
        _project(upload_dir)
        assert client.get("/api/review/file/demo/converted/nope.ts").status_code == 404

    def test_link_out_of_project_is_rejected(self, client, upload_dir):
        project_dir = _project(upload_dir)
        secret = upload_dir / "secret.txt"
        secret.write_text("top secret", encoding="utf-8")
        (project_dir / "leak.txt").symlink_to(secret)
        resp = client.get("/api/review/file/demo/leak.txt")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid file path"}


class TestReport:

    def test_report_after_conversion(self, client, converter, upload_dir):
        _project(upload_dir)
        converter.convert_all("demo")
        data = client.get("/api/review/report/demo").get_json()
        assert data["projectId"] == "demo"
        assert data["stats"]["filesConverted"] == 1
        assert data["files"]["util"] == [{"originalPath": "index.php", "newPath": "utils/index.ts"}]

    def test_report_missing_project(self, client):
        assert client.get("/api/review/report/ghost").status_code == 404

    def test_report_invalid_project_id(self, client):
        assert client.get("/api/review/report/undefined").status_code == 400


# ---------------------------------------------------------------------------
# Snippet conversion
# ---------------------------------------------------------------------------
class TestConvertSnippet:

    def test_converts_snippet(self, client):
        resp = client.post("/api/convert", json={"code": PHP, "fileName": "hello.php"})
        assert resp.status_code == 200
        assert resp.get_json() == {
            "file": "hello.php",
            "success": True,
            "result": "console.log('hello');\n",
        }

    def test_default_file_name(self, client):
        assert client.post("/api/convert", json={"code": PHP}).get_json()["file"] == "snippet.php"

    def test_missing_code(self, client):
        resp = client.post("/api/convert", json={})
        assert resp.status_code == 400

    def test_source_without_open_tag_is_reported(self, client):
        data = client.post("/api/convert", json={"code": "echo 1;"}).get_json()
        assert data["success"] is False
        assert "PHP file must start with <?php" in data["result"]
