"""
Service classes for script generation.
Contains ScriptParser and ScriptGenerator classes.
"""

import json
import random
import re
import uuid
import logging
from typing import Dict, List, Optional

import requests

from scriptreel.config import (
    OPENAI_MODEL,
    SCRIPT_PROMPT_TEMPLATE,
    SCRIPT_TYPES,
    TONES,
    get_openai_credentials,
)
from scriptreel.errors import ConfigurationError, ScriptGenerationError, retry_with_backoff

WORDS_PER_SECOND = 2.5


class RateLimited(Exception):
    """The model endpoint asked us to slow down."""


def estimate_duration(text: str) -> int:
    """Spoken duration in seconds at 150 words per minute."""
    return round(len(text.split()) / WORDS_PER_SECOND)


class ScriptParser:
    """Validates and normalizes the JSON the model returns into storable script rows."""

    def __init__(self, raw_content: str, platforms: List[str], batch_id: Optional[str] = None):
        self.content = raw_content or ""
        self.platforms = platforms
        self.batch_id = batch_id or str(uuid.uuid4())
        self.skipped = 0

    def _strip_markdown(self):
        self.content = re.sub(r"```(?:json)?\n?|```", "", self.content).strip()

    def _extract_items(self, parsed) -> list:
        # Handle both array and object wrapper formats
        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            if isinstance(parsed.get("scripts"), list):
                return parsed["scripts"]
            for value in parsed.values():
                if isinstance(value, list):
                    return value
        return []

    def _build(self, item: Dict, platform: str) -> Dict:
        hook, body, cta = (str(item[key]).strip() for key in ("hook", "body", "cta"))
        full_text = f"{hook} {body} {cta}"
        script_type = item.get("type") if item.get("type") in SCRIPT_TYPES else random.choice(SCRIPT_TYPES)
        tone = item.get("tone") if item.get("tone") in TONES else random.choice(TONES)
        return {
            "hook": hook,
            "body": body,
            "cta": cta,
            "script_type": script_type,
            "platform": platform,
            "tone": tone,
            "character_count": len(full_text),
            "word_count": len(full_text.split()),
            "estimated_duration": estimate_duration(full_text),
            "generated_batch": self.batch_id,
        }

    def run(self) -> List[Dict]:
        if not self.content.strip():
            raise ScriptGenerationError("AI returned an empty response.")
        if not self.platforms:
            raise ScriptGenerationError("At least one platform is required.")

        self._strip_markdown()
        try:
            parsed = json.loads(self.content)
        except json.JSONDecodeError as e:
            logging.error(f"❌ Failed to parse model response: {e}\n--- RESPONSE ---\n{self.content}\n---")
            raise ScriptGenerationError("Failed to parse generated scripts") from e

        scripts = []
        for item in self._extract_items(parsed):
            if not isinstance(item, dict) or not all(str(item.get(k) or "").strip() for k in ("hook", "body", "cta")):
                self.skipped += 1
                continue
            platform = self.platforms[len(scripts) % len(self.platforms)]
            scripts.append(self._build(item, platform))

        if self.skipped:
            logging.warning(f"🔧 Skipped {self.skipped} incomplete scripts from the model response")
        if not scripts:
            raise ScriptGenerationError("No scripts in response")
        return scripts


class ScriptGenerator:
    """Handles AI model communication for script generation."""

    def __init__(self, session: Optional[requests.Session] = None, model: str = OPENAI_MODEL):
        self.session = session or requests.Session()
        self.model = model

    @retry_with_backoff(max_retries=6, initial_delay=2.0, backoff_factor=2.0, max_delay=60.0, retry_on=(RateLimited,))
    def _complete(self, base_url: str, api_key: str, prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_completion_tokens": 4096,
            "response_format": {"type": "json_object"},
        }
        try:
            response = self.session.post(
                f"{base_url}/chat/completions",
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=180,
            )
        except requests.RequestException as e:
            raise ScriptGenerationError(f"Could not connect to the language model: {e}") from e

        if response.status_code == 429 or (not response.ok and "rate limit" in response.text.lower()):
            raise RateLimited(f"{response.status_code}: {response.text[:200]}")
        if not response.ok:
            raise ScriptGenerationError(f"Language model error {response.status_code}: {response.text[:500]}")

        choices = response.json().get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content", "")

    def generate(self, product_features: str, count: int, platforms: List[str]) -> List[Dict]:
        """Generate `count` scripts and return rows ready for ScriptStore.create_scripts."""
        credentials = get_openai_credentials()
        if credentials is None:
            raise ConfigurationError("OpenAI credentials not configured")
        base_url, api_key = credentials

        prompt = SCRIPT_PROMPT_TEMPLATE.format(count=count, product_features=product_features)
        logging.info(f"📝 Requesting {count} scripts from {self.model} for {', '.join(platforms)}")
        try:
            content = self._complete(base_url, api_key, prompt)
        except RateLimited as e:
            raise ScriptGenerationError(f"Language model rate limit not lifted: {e}") from e

        return ScriptParser(content, platforms).run()
