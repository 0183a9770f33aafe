"""
Video generation orchestrator.

The only component that moves a script's video status. A request is acknowledged once the
provider has accepted the job; the rest of the lifecycle runs in a detached task that writes
its outcome back to the script store.
"""

import asyncio
import logging
from typing import Dict, Iterable, Optional, Set, Union

from scriptreel.config import (
    ARCADS_API_BASE,
    OPENAI_TTS_MODEL,
    OPENAI_TTS_VOICE,
    get_arcads_api_key,
    get_openai_credentials,
)
from scriptreel.errors import AlreadyInProgress, ConfigurationError, NotFound
from scriptreel.models import (
    ACTIVE_VIDEO_STATUSES,
    OWNER_API,
    VIDEO_COMPLETE,
    VIDEO_FAILED,
    VIDEO_GENERATING,
    VIDEO_PENDING,
)
from scriptreel.poller import CompletionPoller
from scriptreel.providers import VideoProvider, default_providers
from scriptreel.schemas import (
    ArcadsConfig,
    ProviderAvailability,
    TTSCredentials,
    VideoStartResponse,
    Wav2LipConfig,
)
from scriptreel.storage import ScriptStore, SettingsStore

BatchOutcome = Dict[str, Union[VideoStartResponse, BaseException]]


class VideoOrchestrator:
    def __init__(
        self,
        store: ScriptStore,
        settings_store: SettingsStore,
        providers: Optional[Dict[str, VideoProvider]] = None,
        poller: Optional[CompletionPoller] = None,
        owner: str = OWNER_API,
    ):
        self.store = store
        self.settings_store = settings_store
        self.providers = providers if providers is not None else default_providers()
        self.poller = poller or CompletionPoller()
        self.owner = owner
        self._tasks: Set[asyncio.Task] = set()

    # --- configuration ---

    def _provider(self, provider: str) -> VideoProvider:
        adapter = self.providers.get(provider)
        if adapter is None:
            raise ConfigurationError(f"Unknown video provider '{provider}'")
        return adapter

    def resolve_config(self, provider: str, avatar_image_url: Optional[str] = None, polling: bool = False):
        """Builds the provider configuration from current settings and environment. Never cached."""
        settings = self.settings_store.get_settings()

        if provider == "arcads":
            api_key = get_arcads_api_key()
            if not api_key:
                raise ConfigurationError("Arcads API key not configured")
            return ArcadsConfig(
                api_key=api_key,
                avatar_id=settings.arcads_avatar_id or "default",
                api_base=ARCADS_API_BASE,
            )

        if provider == "wav2lip":
            if not settings.wav2lip_api_url:
                raise ConfigurationError("Wav2Lip API URL not configured in settings")
            image_url = avatar_image_url or settings.wav2lip_avatar_image_url
            if not image_url and not polling:
                raise ConfigurationError("Avatar image URL is required")
            credentials = get_openai_credentials()
            tts = None
            if credentials:
                base_url, api_key = credentials
                tts = TTSCredentials(base_url=base_url, api_key=api_key, model=OPENAI_TTS_MODEL, voice=OPENAI_TTS_VOICE)
            return Wav2LipConfig(api_url=settings.wav2lip_api_url, avatar_image_url=image_url or "", tts=tts)

        raise ConfigurationError(f"Unknown video provider '{provider}'")

    def get_provider_availability(self, provider: str) -> ProviderAvailability:
        settings = self.settings_store.get_settings()
        if provider == "arcads":
            return ProviderAvailability(configured=bool(get_arcads_api_key()), enabled=settings.arcads_enabled)
        if provider == "wav2lip":
            return ProviderAvailability(configured=bool(settings.wav2lip_api_url), enabled=settings.wav2lip_enabled)
        return ProviderAvailability(configured=False)

    # --- job lifecycle ---

    async def request_video(
        self, script_id: str, provider: str, avatar_image_url: Optional[str] = None
    ) -> VideoStartResponse:
        adapter = self._provider(provider)

        script = self.store.get_script(script_id)
        if script is None:
            raise NotFound(f"Script {script_id} not found")
        if script.video_status in ACTIVE_VIDEO_STATUSES:
            raise AlreadyInProgress(f"Video is already being processed for script {script_id}")

        config = self.resolve_config(provider, avatar_image_url)

        if not self.store.claim_video_job(script_id, provider, owner=self.owner):
            raise AlreadyInProgress(f"Video is already being processed for script {script_id}")
        logging.info(f"📝 Video job for script {script_id} marked {VIDEO_PENDING} ({provider})")

        try:
            accepted = await asyncio.to_thread(adapter.start_job, script, config)
        except Exception as e:
            logging.error(f"❌ Failed to start {provider} video for script {script_id}: {e}")
            self.store.set_video_status(script_id, VIDEO_FAILED, error=str(e), expected_status=VIDEO_PENDING)
            raise

        if self.store.set_video_status(
            script_id, VIDEO_GENERATING, provider_job_id=accepted.job_id, expected_status=VIDEO_PENDING
        ) is None:
            # Another writer ended the claim while the provider was answering
            raise AlreadyInProgress(f"Video job for script {script_id} was taken over before {provider} accepted it")
        logging.info(f"✨ {provider} accepted script {script_id} as job {accepted.job_id}")

        self._launch(self._follow_job(script_id, provider, accepted.job_id, avatar_image_url))
        return VideoStartResponse(started=True, job_id=accepted.job_id)

    def _launch(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _follow_job(self, script_id: str, provider: str, job_id: str, avatar_image_url: Optional[str] = None):
        adapter = self._provider(provider)

        def check(provider_job_id: str):
            return adapter.check_status(provider_job_id, self.resolve_config(provider, avatar_image_url, polling=True))

        try:
            result = await self.poller.run(check, job_id, provider)
        except Exception as e:
            logging.error(f"❌ Video generation failed for script {script_id} (job {job_id}): {e}")
            self.store.set_video_status(
                script_id, VIDEO_FAILED, provider_job_id=job_id, error=str(e), expected_status=VIDEO_GENERATING
            )
            return

        saved = self.store.set_video_status(
            script_id, VIDEO_COMPLETE, result_url=result.result_url, provider_job_id=job_id,
            expected_status=VIDEO_GENERATING,
        )
        if saved is not None:
            logging.info(f"✅ Video complete for script {script_id}: {result.result_url}")

    async def request_batch(self, script_ids: Iterable[str], provider: str) -> BatchOutcome:
        """Starts every script independently; one failure never affects the others."""
        script_ids = list(script_ids)
        results = await asyncio.gather(
            *(self.request_video(script_id, provider) for script_id in script_ids),
            return_exceptions=True,
        )
        outcome = dict(zip(script_ids, results))
        failures = [sid for sid, result in outcome.items() if isinstance(result, BaseException)]
        if failures:
            logging.warning(f"{len(failures)}/{len(script_ids)} video jobs could not be started: {failures}")
        return outcome

    async def drain(self):
        """Waits until every detached job has reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def run_batch(self, script_ids: Iterable[str], provider: str) -> BatchOutcome:
        outcome = await self.request_batch(script_ids, provider)
        await self.drain()
        return outcome

    async def resume_active_jobs(self) -> int:
        """
        Re-attaches pollers to jobs this role left in flight before a restart.
        Jobs claimed by another role (the Celery worker for the API, and back) are left alone.
        """
        resumed = 0
        for script in self.store.active_video_scripts(owner=self.owner):
            if script.video_status == VIDEO_GENERATING and script.video_job_id and script.video_provider in self.providers:
                self._launch(self._follow_job(script.id, script.video_provider, script.video_job_id))
                resumed += 1
            else:
                self.store.set_video_status(
                    script.id, VIDEO_FAILED, provider_job_id=script.video_job_id,
                    error="Interrupted before the provider accepted the job",
                    expected_status=script.video_status,
                )
        if resumed:
            logging.info(f"Resumed polling for {resumed} video jobs")
        return resumed
