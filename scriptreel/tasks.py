# tasks.py

import asyncio
import logging

from celery import Celery
from celery.schedules import crontab

from scriptreel.config import DEFAULT_PRODUCT_FEATURES, PLATFORMS, REDIS_URL
from scriptreel.models import OWNER_WORKER
from scriptreel.orchestrator import VideoOrchestrator
from scriptreel.services import ScriptGenerator
from scriptreel.storage import ScriptStore, SettingsStore

celery = Celery("scriptreel", broker=REDIS_URL, backend=REDIS_URL)
celery.conf.beat_schedule = {
    "generate-scripts-every-3-hours": {
        "task": "scriptreel.tasks.generate_scheduled_scripts",
        "schedule": crontab(minute=0, hour="*/3"),
    },
}
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


def run_scheduled_generation(store: ScriptStore, settings_store: SettingsStore, generator: ScriptGenerator, orchestrator: VideoOrchestrator) -> dict:
    """
    Body of the scheduled job, kept separate from the Celery wrapper so it can run with any stores.
    Video jobs started here are polled to completion before returning, since the worker has no long-lived loop.
    """
    settings = settings_store.get_settings()
    if not settings.auto_generate_enabled:
        logging.info("Auto generation is disabled, skipping...")
        return {"skipped": True, "scripts_generated": 0}

    product_features = settings.product_features or DEFAULT_PRODUCT_FEATURES
    items = generator.generate(product_features, settings.daily_script_count, PLATFORMS)
    scripts = store.create_scripts(items)
    logging.info(f"✅ Generated {len(scripts)} scripts")

    summary = {
        "skipped": False,
        "scripts_generated": len(scripts),
        "batch_id": scripts[0].generated_batch if scripts else None,
        "videos_started": 0,
    }

    if settings.auto_generate_videos:
        provider = settings.preferred_provider
        availability = orchestrator.get_provider_availability(provider)
        if availability.configured and availability.enabled:
            outcome = asyncio.run(orchestrator.run_batch([s.id for s in scripts], provider))
            summary["videos_started"] = sum(1 for r in outcome.values() if not isinstance(r, BaseException))
        else:
            logging.info(f"Auto video generation skipped: {provider} is not configured or not enabled")

    return summary


@celery.task(name="scriptreel.tasks.generate_scheduled_scripts")
def generate_scheduled_scripts():
    """
    Scheduled script generation. Failures are logged and re-raised so Celery records them.
    """
    logging.info("📝 Running scheduled script generation job...")
    store = ScriptStore()
    settings_store = SettingsStore()
    try:
        return run_scheduled_generation(
            store, settings_store, ScriptGenerator(), VideoOrchestrator(store, settings_store, owner=OWNER_WORKER)
        )
    except Exception as e:
        logging.error(f"❌ Scheduled script generation failed: {e}")
        raise
