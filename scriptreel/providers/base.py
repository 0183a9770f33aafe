from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Optional

import requests

from scriptreel.errors import ProviderError
from scriptreel.schemas import ProviderResponse

# Native vocabularies seen from the providers, mapped onto the ProviderResponse contract
STATUS_ALIASES = {
    "pending": "pending",
    "queued": "pending",
    "processing": "processing",
    "generating": "processing",
    "running": "processing",
    "completed": "completed",
    "complete": "completed",
    "failed": "failed",
    "error": "failed",
}


def normalize_status(raw: Optional[str], default: str = "pending") -> str:
    if not raw:
        return default
    status = STATUS_ALIASES.get(str(raw).strip().lower())
    if status is None:
        logging.warning(f"Unknown provider status '{raw}', treating as processing")
        return "processing"
    return status


def full_script_text(script) -> str:
    """Spoken text: hook, body and call-to-action joined by single spaces."""
    return f"{script.hook} {script.body} {script.cta}"


def first_present(data: Dict[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


class VideoProvider(ABC):
    """
    Contract every video provider adapter implements.
    Configuration is passed on each call and never kept on the adapter.
    """

    name = "provider"

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    @abstractmethod
    def start_job(self, script, config) -> ProviderResponse:
        """Submit a script for rendering and return the accepted job."""

    @abstractmethod
    def check_status(self, provider_job_id: str, config) -> ProviderResponse:
        """Query a job once."""

    def _send(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logging.error(f"❌ {self.name} request to {url} failed: {e}")
            raise ProviderError(self.name, str(e)) from e

        if not response.ok:
            logging.error(f"❌ {self.name} API error: {response.status_code} {response.text}")
            raise ProviderError(self.name, response.text, status_code=response.status_code, body=response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON response: {e}", status_code=response.status_code) from e
        if not isinstance(data, dict):
            logging.error(f"❌ {self.name} returned a non-object body: {response.text}")
            raise ProviderError(self.name, "unexpected response body", status_code=response.status_code, body=response.text)
        return data
