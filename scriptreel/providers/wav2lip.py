"""
Self-hosted Wav2Lip adapter: speech audio plus a still avatar image, sent as multipart form data.
"""

import logging
from typing import Optional

import requests

from scriptreel.config import PROVIDER_TIMEOUT_SECONDS
from scriptreel.errors import ConfigurationError, ProviderError
from scriptreel.providers.base import VideoProvider, first_present, full_script_text, normalize_status
from scriptreel.schemas import ProviderResponse, Wav2LipConfig
from scriptreel.tts import SpeechSynthesizer


class Wav2LipProvider(VideoProvider):
    """Lip-syncs synthesized speech onto an avatar image. Accepts snake_case or camelCase replies."""

    name = "wav2lip"

    def __init__(self, session: Optional[requests.Session] = None, synthesizer: Optional[SpeechSynthesizer] = None):
        super().__init__(session)
        self.synthesizer = synthesizer or SpeechSynthesizer()

    def _check_config(self, config: Wav2LipConfig):
        if not config.api_url:
            raise ConfigurationError("Wav2Lip API URL not configured in settings")
        if not config.avatar_image_url:
            raise ConfigurationError("Wav2Lip avatar image URL is required")

    def start_job(self, script, config: Wav2LipConfig) -> ProviderResponse:
        self._check_config(config)

        # Raises DependencyUnavailable before any video request when speech cannot be produced
        audio = self.synthesizer.synthesize(full_script_text(script), config.tts)

        logging.info(f"🎬 Submitting script {script.id} to Wav2Lip at {config.api_url}")
        data = self._send(
            "POST",
            f"{config.api_url.rstrip('/')}/generate",
            files={"audio": ("speech.mp3", audio, "audio/mpeg")},
            data={"image_url": config.avatar_image_url, "script_id": script.id},
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )

        job_id = first_present(data, "job_id", "jobId")
        if not job_id:
            raise ProviderError(self.name, "response did not include a job id")
        return ProviderResponse(
            job_id=str(job_id),
            status=normalize_status(data.get("status")),
            result_url=first_present(data, "video_url", "videoUrl"),
        )

    def check_status(self, provider_job_id: str, config: Wav2LipConfig) -> ProviderResponse:
        if not config.api_url:
            raise ConfigurationError("Wav2Lip API URL not configured in settings")

        data = self._send(
            "GET",
            f"{config.api_url.rstrip('/')}/status/{provider_job_id}",
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )
        return ProviderResponse(
            job_id=provider_job_id,
            status=normalize_status(data.get("status"), default="processing"),
            result_url=first_present(data, "video_url", "videoUrl"),
            error=data.get("error"),
        )
