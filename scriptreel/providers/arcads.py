"""
Arcads.ai adapter: JSON over authenticated HTTPS.
"""

import logging

from scriptreel.config import PROVIDER_TIMEOUT_SECONDS
from scriptreel.errors import ConfigurationError, ProviderError
from scriptreel.providers.base import VideoProvider, first_present, full_script_text, normalize_status
from scriptreel.schemas import ArcadsConfig, ProviderResponse


class ArcadsProvider(VideoProvider):
    """Commercial talking-avatar API. Never retries; the poller owns repetition."""

    name = "arcads"

    def _check_config(self, config: ArcadsConfig):
        if not config.api_key:
            raise ConfigurationError("Arcads API key not configured")
        if not config.avatar_id:
            raise ConfigurationError("Arcads avatar id not configured")

    def _headers(self, config: ArcadsConfig) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }

    def start_job(self, script, config: ArcadsConfig) -> ProviderResponse:
        self._check_config(config)

        payload = {
            "script": full_script_text(script),
            "avatar_id": config.avatar_id,
            "voice_settings": {"speed": 1.0, "pitch": 1.0},
        }
        logging.info(f"🎬 Submitting script {script.id} to Arcads with avatar {config.avatar_id}")
        data = self._send(
            "POST",
            f"{config.api_base.rstrip('/')}/videos/generate",
            json=payload,
            headers=self._headers(config),
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )

        job_id = first_present(data, "job_id", "id")
        if not job_id:
            raise ProviderError(self.name, "response did not include a job id")
        return ProviderResponse(
            job_id=str(job_id),
            status=normalize_status(data.get("status")),
            result_url=data.get("video_url"),
        )

    def check_status(self, provider_job_id: str, config: ArcadsConfig) -> ProviderResponse:
        self._check_config(config)

        data = self._send(
            "GET",
            f"{config.api_base.rstrip('/')}/videos/status/{provider_job_id}",
            headers={"Authorization": f"Bearer {config.api_key}"},
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )
        return ProviderResponse(
            job_id=str(data.get("job_id") or provider_job_id),
            status=normalize_status(data.get("status"), default="processing"),
            result_url=data.get("video_url"),
            error=data.get("error"),
        )
