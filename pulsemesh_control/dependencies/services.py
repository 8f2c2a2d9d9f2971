"""
Service Dependencies

FastAPI dependencies that build services from the current Settings.
Tests swap these out with app.dependency_overrides.
"""

from fastapi import Depends

from ..config import Settings, get_settings
from ..services.restart_runner import RestartCommand, RestartRunner


def get_restart_runner(settings: Settings = Depends(get_settings)) -> RestartRunner:
    """
    Dependency for getting the restart runner in routes.

    The command is rebuilt from deployment settings only; request data
    never reaches it.
    """
    return RestartRunner(RestartCommand.from_settings(settings))
