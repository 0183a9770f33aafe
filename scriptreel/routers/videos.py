"""
Router for video generation endpoints.
Starting a job returns once the provider accepts it; completion is observed through the job view.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from scriptreel.dependencies import get_orchestrator, get_script_store, get_settings_store, http_error
from scriptreel.errors import ScriptReelError
from scriptreel.orchestrator import VideoOrchestrator
from scriptreel.schemas import (
    ProviderAvailability,
    ProviderName,
    VideoJobResponse,
    VideoRequest,
    VideoStartResponse,
)
from scriptreel.storage import ScriptStore, SettingsStore

router = APIRouter(tags=["videos"])


@router.post("/api/scripts/{script_id}/generate-video", response_model=VideoStartResponse)
async def generate_video(
    script_id: str,
    request: Optional[VideoRequest] = None,
    settings_store: SettingsStore = Depends(get_settings_store),
    orchestrator: VideoOrchestrator = Depends(get_orchestrator),
):
    request = request or VideoRequest()
    provider = request.provider or settings_store.get_settings().preferred_provider
    try:
        return await orchestrator.request_video(script_id, provider, request.avatar_image_url)
    except ScriptReelError as e:
        logging.warning(f"Video request for script {script_id} via {provider} rejected: {e}")
        raise http_error(e)


@router.get("/api/scripts/{script_id}/video", response_model=VideoJobResponse)
def get_video_job(script_id: str, store: ScriptStore = Depends(get_script_store)):
    script = store.get_script(script_id)
    if script is None:
        raise HTTPException(status_code=404, detail="Script not found")
    return {
        "script_id": script.id,
        "status": script.video_status,
        "provider": script.video_provider,
        "provider_job_id": script.video_job_id,
        "result_url": script.video_url,
        "error": script.video_error,
    }


@router.get("/api/providers/{provider}/status", response_model=ProviderAvailability)
def provider_status(provider: ProviderName, orchestrator: VideoOrchestrator = Depends(get_orchestrator)):
    return orchestrator.get_provider_availability(provider)
