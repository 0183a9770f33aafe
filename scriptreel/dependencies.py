"""
FastAPI dependencies and the mapping from domain errors to HTTP responses.
"""

from fastapi import HTTPException

from scriptreel.errors import (
    AlreadyInProgress,
    ConfigurationError,
    DependencyUnavailable,
    NotFound,
    ProviderError,
    ScriptGenerationError,
    ScriptReelError,
)
from scriptreel.orchestrator import VideoOrchestrator
from scriptreel.services import ScriptGenerator
from scriptreel.storage import ScriptStore, SettingsStore

_orchestrator = None


def get_script_store() -> ScriptStore:
    return ScriptStore()


def get_settings_store() -> SettingsStore:
    return SettingsStore()


def get_script_generator() -> ScriptGenerator:
    return ScriptGenerator()


def get_orchestrator() -> VideoOrchestrator:
    # One orchestrator per process so detached jobs stay referenced between requests
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = VideoOrchestrator(ScriptStore(), SettingsStore())
    return _orchestrator


ERROR_STATUS_CODES = [
    (NotFound, 404),
    (AlreadyInProgress, 409),
    (ConfigurationError, 400),
    (DependencyUnavailable, 503),
    (ProviderError, 502),
    (ScriptGenerationError, 502),
]


def http_error(error: ScriptReelError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
