"""Shared fixtures for PulseMesh control tests."""

import stat
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pulsemesh_control.config import Settings
from pulsemesh_control.main import create_app


@pytest.fixture
def make_script(tmp_path: Path):
    """Factory writing an executable /bin/sh stub and returning its path."""

    def _make(body: str, name: str = "restart_stub.sh", executable: bool = True) -> str:
        path = tmp_path / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        if executable:
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def settings(make_script) -> Settings:
    """Settings pointing at a succeeding stub, without sudo."""
    return Settings(
        restart_script=make_script("exit 0"),
        use_sudo=False,
        restart_timeout_seconds=5,
    )


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
