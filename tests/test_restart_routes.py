"""Tests for POST /api/restart."""

import pytest
from fastapi.testclient import TestClient

from pulsemesh_control.config import Settings
from pulsemesh_control.dependencies.services import get_restart_runner
from pulsemesh_control.main import create_app
from pulsemesh_control.services.restart_runner import RestartResult


class FakeRunner:
    """Stands in for RestartRunner, counting calls."""

    def __init__(self, result: RestartResult):
        self.result = result
        self.calls = 0

    def restart(self) -> RestartResult:
        self.calls += 1
        return self.result


def client_with_result(settings: Settings, result: RestartResult) -> tuple[TestClient, FakeRunner]:
    app = create_app(settings)
    runner = FakeRunner(result)
    app.dependency_overrides[get_restart_runner] = lambda: runner
    return TestClient(app), runner


class TestRestartEndpoint:

    def test_success_response_shape(self, settings):
        client, runner = client_with_result(settings, RestartResult(exit_code=0))

        response = client.post("/api/restart")

        assert response.status_code == 200
        assert response.json() == {
            "succeeded": True,
            "exitCode": 0,
            "outputLines": [],
            "message": "PulseMesh restart initiated successfully.",
        }
        assert runner.calls == 1

    def test_command_failure_is_still_200(self, settings):
        client, _ = client_with_result(
            settings,
            RestartResult(exit_code=1, output_lines=["sudo: a password is required"]),
        )

        response = client.post("/api/restart")

        assert response.status_code == 200
        body = response.json()
        assert body["succeeded"] is False
        assert body["exitCode"] == 1
        assert body["outputLines"] == ["sudo: a password is required"]
        assert body["message"].startswith("Error restarting PulseMesh.")

    def test_output_is_returned_unescaped(self, settings):
        client, _ = client_with_result(
            settings,
            RestartResult(exit_code=2, output_lines=["<b>failed</b> & done"]),
        )

        body = client.post("/api/restart").json()

        assert body["outputLines"] == ["<b>failed</b> & done"]

    def test_get_not_allowed(self, settings):
        client, runner = client_with_result(settings, RestartResult(exit_code=0))

        response = client.get("/api/restart")

        assert response.status_code == 405
        assert runner.calls == 0

    def test_request_body_is_ignored(self, settings):
        client, runner = client_with_result(settings, RestartResult(exit_code=0))

        response = client.post("/api/restart", json={"script": "/bin/rm", "args": ["-rf", "/"]})

        assert response.status_code == 200
        assert runner.calls == 1


class TestRestartWithRealScript:
    """End to end through the real runner with a stub script."""

    def test_stub_exit_zero(self, client):
        body = client.post("/api/restart").json()
        assert body == {
            "succeeded": True,
            "exitCode": 0,
            "outputLines": [],
            "message": "PulseMesh restart initiated successfully.",
        }

    def test_stub_failure_with_output(self, make_script):
        settings = Settings(
            restart_script=make_script("echo line1\necho line2 >&2\nexit 1", name="fail.sh"),
            use_sudo=False,
        )
        with TestClient(create_app(settings)) as client:
            body = client.post("/api/restart").json()

        assert body["succeeded"] is False
        assert body["exitCode"] == 1
        assert body["outputLines"] == ["line1", "line2"]
        assert body["message"].endswith("Output:\nline1\nline2")

    def test_missing_script_never_errors(self, tmp_path):
        settings = Settings(restart_script=str(tmp_path / "missing.sh"), use_sudo=False)
        with TestClient(create_app(settings)) as client:
            response = client.post("/api/restart")

        assert response.status_code == 200
        assert response.json()["succeeded"] is False
        assert response.json()["exitCode"] == 127


class TestRestartAuth:

    @pytest.fixture
    def token_settings(self, make_script) -> Settings:
        return Settings(
            restart_script=make_script("exit 0"),
            use_sudo=False,
            api_token="s3cret",
        )

    def test_missing_token_rejected(self, token_settings):
        client, runner = client_with_result(token_settings, RestartResult(exit_code=0))

        response = client.post("/api/restart")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert runner.calls == 0

    def test_wrong_token_rejected(self, token_settings):
        client, runner = client_with_result(token_settings, RestartResult(exit_code=0))

        response = client.post("/api/restart", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert runner.calls == 0

    def test_valid_token_accepted(self, token_settings):
        client, runner = client_with_result(token_settings, RestartResult(exit_code=0))

        response = client.post("/api/restart", headers={"Authorization": "Bearer s3cret"})

        assert response.status_code == 200
        assert runner.calls == 1

    def test_no_token_configured_is_open(self, settings):
        client, runner = client_with_result(settings, RestartResult(exit_code=0))

        assert client.post("/api/restart").status_code == 200
        assert runner.calls == 1
