# tests/test_services.py

import json
from unittest.mock import Mock

import pytest
import requests

from scriptreel.config import SCRIPT_TYPES, TONES
from scriptreel.errors import ConfigurationError, ScriptGenerationError, retry_with_backoff
from scriptreel.services import ScriptGenerator, ScriptParser, estimate_duration

SCRIPTS = [
    {"hook": "Paid my friend in one tap", "body": "No fees at all.", "cta": "Download Bearo", "type": "product-demo", "tone": "excited"},
    {"hook": "I was skeptical", "body": "Then HONEY settled instantly.", "cta": "Try it today", "type": "skeptic-to-believer", "tone": "casual"},
    {"hook": "Founders hate fees", "body": "So we removed them.", "cta": "Join now", "type": "founder-story", "tone": "persuasive"},
]


def test_script_parser_strips_markdown():
    """
    Tests if the ScriptParser removes markdown fences around the JSON.
    """
    raw = "```json\n" + json.dumps({"scripts": SCRIPTS[:1]}) + "\n```"

    scripts = ScriptParser(raw, ["tiktok"]).run()

    assert len(scripts) == 1
    assert scripts[0]["hook"] == "Paid my friend in one tap"


def test_script_parser_handles_empty_input():
    with pytest.raises(ScriptGenerationError):
        ScriptParser("   ", ["tiktok"]).run()


@pytest.mark.parametrize("payload", [
    SCRIPTS,
    {"scripts": SCRIPTS},
    {"results": SCRIPTS},
])
def test_script_parser_accepts_wrapped_and_bare_arrays(payload):
    assert len(ScriptParser(json.dumps(payload), ["tiktok"]).run()) == 3


def test_script_parser_rejects_invalid_json_and_empty_lists():
    with pytest.raises(ScriptGenerationError):
        ScriptParser("not json", ["tiktok"]).run()
    with pytest.raises(ScriptGenerationError):
        ScriptParser(json.dumps({"scripts": []}), ["tiktok"]).run()


def test_script_parser_assigns_platforms_round_robin_and_one_batch():
    scripts = ScriptParser(json.dumps(SCRIPTS), ["twitter", "tiktok"], batch_id="batch-9").run()

    assert [s["platform"] for s in scripts] == ["twitter", "tiktok", "twitter"]
    assert {s["generated_batch"] for s in scripts} == {"batch-9"}


def test_script_parser_computes_metadata():
    script = ScriptParser(json.dumps(SCRIPTS[:1]), ["tiktok"]).run()[0]
    text = "Paid my friend in one tap No fees at all. Download Bearo"

    assert script["character_count"] == len(text)
    assert script["word_count"] == 12
    assert script["estimated_duration"] == 5
    assert script["script_type"] == "product-demo"
    assert script["tone"] == "excited"


def test_script_parser_defaults_unknown_type_and_tone_and_skips_incomplete():
    items = [
        {"hook": "H", "body": "B", "cta": "C", "type": "infomercial", "tone": "angry"},
        {"hook": "H", "body": "", "cta": "C"},
        "not an object",
    ]
    parser = ScriptParser(json.dumps(items), ["instagram"])
    scripts = parser.run()

    assert len(scripts) == 1
    assert parser.skipped == 2
    assert scripts[0]["script_type"] in SCRIPT_TYPES
    assert scripts[0]["tone"] in TONES


def test_estimate_duration():
    assert estimate_duration(" ".join(["word"] * 50)) == 20


# --- generator ---

class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


def completion(content):
    return FakeResponse(payload={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def openai_env(monkeypatch):
    monkeypatch.setenv("OPENAI_BASE_URL", "https://llm.test/v1")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr("scriptreel.errors.time.sleep", delays.append)
    return delays


def test_generator_requires_credentials():
    session = Mock(spec=requests.Session)
    with pytest.raises(ConfigurationError):
        ScriptGenerator(session).generate("zero fees", 3, ["tiktok"])
    assert session.post.call_count == 0


def test_generator_sends_prompt_and_parses(openai_env):
    session = Mock(spec=requests.Session)
    session.post.return_value = completion(json.dumps({"scripts": SCRIPTS}))

    scripts = ScriptGenerator(session, model="gpt-test").generate("zero fees", 3, ["tiktok"])

    args, kwargs = session.post.call_args
    assert args == ("https://llm.test/v1/chat/completions",)
    assert kwargs["json"]["model"] == "gpt-test"
    assert kwargs["json"]["response_format"] == {"type": "json_object"}
    assert "zero fees" in kwargs["json"]["messages"][0]["content"]
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert len(scripts) == 3


def test_generator_retries_rate_limits_with_backoff(openai_env, no_sleep):
    session = Mock(spec=requests.Session)
    session.post.side_effect = [
        FakeResponse(status_code=429, text="Too many requests"),
        FakeResponse(status_code=429, text="Too many requests"),
        completion(json.dumps(SCRIPTS)),
    ]

    scripts = ScriptGenerator(session).generate("zero fees", 3, ["tiktok"])

    assert len(scripts) == 3
    assert session.post.call_count == 3
    assert no_sleep == [2.0, 4.0]


def test_generator_does_not_retry_other_errors(openai_env, no_sleep):
    session = Mock(spec=requests.Session)
    session.post.return_value = FakeResponse(status_code=400, text="bad request")

    with pytest.raises(ScriptGenerationError):
        ScriptGenerator(session).generate("zero fees", 3, ["tiktok"])
    assert session.post.call_count == 1
    assert no_sleep == []


def test_generator_gives_up_when_rate_limit_persists(openai_env, no_sleep):
    session = Mock(spec=requests.Session)
    session.post.return_value = FakeResponse(status_code=429, text="rate limit exceeded")

    with pytest.raises(ScriptGenerationError):
        ScriptGenerator(session).generate("zero fees", 3, ["tiktok"])
    assert session.post.call_count == 6
    assert no_sleep == [2.0, 4.0, 8.0, 16.0, 32.0]


def test_retry_with_backoff_caps_delay(no_sleep):
    calls = []

    @retry_with_backoff(max_retries=4, initial_delay=1.0, backoff_factor=10.0, max_delay=5.0, retry_on=(KeyError,))
    def flaky():
        calls.append(1)
        if len(calls) < 4:
            raise KeyError("again")
        return "ok"

    assert flaky() == "ok"
    assert no_sleep == [1.0, 5.0, 5.0]
