"""
Router for script endpoints.
Handles listing, status changes, CSV export, batch generation and dashboard stats.
"""

import asyncio
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from scriptreel.config import EXPORTS_DIR
from scriptreel.dependencies import (
    get_orchestrator,
    get_script_generator,
    get_script_store,
    get_settings_store,
    http_error,
)
from scriptreel.errors import ScriptReelError
from scriptreel.orchestrator import VideoOrchestrator
from scriptreel.schemas import (
    GenerationRequest,
    GenerationResponse,
    ScriptOut,
    ScriptStatusUpdate,
    StatsResponse,
    TriggerResponse,
)
from scriptreel.services import ScriptGenerator
from scriptreel.storage import ScriptStore, SettingsStore
from scriptreel.tasks import generate_scheduled_scripts

# Create the router
router = APIRouter(tags=["scripts"])


@router.get("/api/scripts", response_model=List[ScriptOut])
def list_scripts(store: ScriptStore = Depends(get_script_store)):
    return store.list_scripts()


@router.get("/api/scripts/recent", response_model=List[ScriptOut])
def recent_scripts(limit: int = Query(default=10, ge=1, le=100), store: ScriptStore = Depends(get_script_store)):
    return store.recent_scripts(limit)


@router.get("/api/scripts/export")
def export_scripts(store: ScriptStore = Depends(get_script_store)):
    """Returns every script as a CSV attachment and keeps a copy in the exports folder."""
    csv_text = store.export_csv(EXPORTS_DIR)
    filename = f"scripts-export-{datetime.utcnow().strftime('%Y-%m-%d')}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/api/scripts/{script_id}", response_model=ScriptOut)
def get_script(script_id: str, store: ScriptStore = Depends(get_script_store)):
    script = store.get_script(script_id)
    if script is None:
        raise HTTPException(status_code=404, detail="Script not found")
    return script


@router.patch("/api/scripts/{script_id}/status", response_model=ScriptOut)
def update_script_status(script_id: str, update: ScriptStatusUpdate, store: ScriptStore = Depends(get_script_store)):
    script = store.update_script_status(script_id, update.status)
    if script is None:
        raise HTTPException(status_code=404, detail="Script not found")
    return script


@router.delete("/api/scripts/{script_id}")
def delete_script(script_id: str, store: ScriptStore = Depends(get_script_store)):
    if not store.delete_script(script_id):
        raise HTTPException(status_code=404, detail="Script not found")
    return {"success": True}


@router.post("/api/scripts/generate", response_model=GenerationResponse)
async def generate_scripts(
    request: GenerationRequest,
    store: ScriptStore = Depends(get_script_store),
    settings_store: SettingsStore = Depends(get_settings_store),
    generator: ScriptGenerator = Depends(get_script_generator),
    orchestrator: VideoOrchestrator = Depends(get_orchestrator),
):
    """Generates a batch of scripts and, when enabled, starts their videos."""
    try:
        items = await asyncio.to_thread(generator.generate, request.product_features, request.count, request.platforms)
    except ScriptReelError as e:
        logging.error(f"Script generation failed: {e}")
        raise http_error(e)

    scripts = store.create_scripts(items)
    batch_id = scripts[0].generated_batch if scripts else ""

    videos_started = 0
    settings = settings_store.get_settings()
    if settings.auto_generate_videos:
        provider = settings.preferred_provider
        availability = orchestrator.get_provider_availability(provider)
        if availability.configured and availability.enabled:
            outcome = await orchestrator.request_batch([s.id for s in scripts], provider)
            videos_started = sum(1 for result in outcome.values() if not isinstance(result, BaseException))
            scripts = [store.get_script(s.id) for s in scripts]
        else:
            logging.info(f"Auto video generation skipped: {provider} is not configured or not enabled")

    return GenerationResponse(
        success=True,
        scripts=[ScriptOut.model_validate(s) for s in scripts],
        batch_id=batch_id,
        message=f"Generated {len(scripts)} scripts successfully",
        videos_started=videos_started,
    )


@router.get("/api/stats", response_model=StatsResponse)
def get_stats(store: ScriptStore = Depends(get_script_store)):
    return store.get_stats()


@router.post("/api/trigger-daily-generation", response_model=TriggerResponse)
def trigger_daily_generation():
    """Queues the scheduled generation job immediately."""
    try:
        task = generate_scheduled_scripts.delay()
    except Exception as e:
        logging.error(f"Failed to submit task to Celery: {e}")
        raise HTTPException(status_code=500, detail="Failed to queue the daily generation job.")
    logging.info(f"✨ Daily generation queued as task {task.id}")
    return {"task_id": task.id, "status": "queued"}
