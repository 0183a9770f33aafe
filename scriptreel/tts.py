"""
Text-to-speech bridge used by the self-hosted lip-sync provider.
Turns the spoken script into an MP3 payload through an OpenAI-compatible speech endpoint.
"""

import logging
from typing import Optional

import requests

from scriptreel.config import PROVIDER_TIMEOUT_SECONDS
from scriptreel.errors import DependencyUnavailable, ProviderError
from scriptreel.schemas import TTSCredentials


class SpeechSynthesizer:
    """Converts text to audio bytes."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def synthesize(self, text: str, credentials: Optional[TTSCredentials]) -> bytes:
        if credentials is None or not credentials.base_url or not credentials.api_key:
            # No speech credentials is a missing prerequisite, not a network failure
            raise DependencyUnavailable("Text-to-speech is not configured; cannot synthesize script audio")
        if not text.strip():
            raise DependencyUnavailable("Cannot synthesize speech from empty script text")

        payload = {
            "model": credentials.model,
            "voice": credentials.voice,
            "input": text,
            "response_format": "mp3",
        }
        logging.info(f"🔊 Synthesizing {len(text.split())} words with {credentials.model}/{credentials.voice}")
        try:
            response = self.session.post(
                f"{credentials.base_url}/audio/speech",
                json=payload,
                headers={"Authorization": f"Bearer {credentials.api_key}"},
                timeout=PROVIDER_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise ProviderError("tts", str(e)) from e

        if not response.ok:
            logging.error(f"❌ TTS request failed: {response.status_code} {response.text}")
            raise ProviderError("tts", response.text, status_code=response.status_code, body=response.text)

        if not response.content:
            raise DependencyUnavailable("Text-to-speech returned an empty audio payload")
        return response.content
