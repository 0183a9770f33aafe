"""
Router for runtime settings.
"""

from fastapi import APIRouter, Depends

from scriptreel.dependencies import get_settings_store
from scriptreel.schemas import SettingsOut, SettingsUpdate
from scriptreel.storage import SettingsStore

router = APIRouter(tags=["settings"])


@router.get("/api/settings", response_model=SettingsOut)
def get_settings(settings_store: SettingsStore = Depends(get_settings_store)):
    return settings_store.get_settings()


@router.put("/api/settings", response_model=SettingsOut)
def update_settings(update: SettingsUpdate, settings_store: SettingsStore = Depends(get_settings_store)):
    """Partial update; fields left out of the body keep their stored value."""
    return settings_store.update_settings(update.model_dump(exclude_unset=True))
