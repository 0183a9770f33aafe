import os
import tempfile

# Keep the module-level engine away from the working directory
os.environ.setdefault("SCRIPTREEL_DATA_DIR", tempfile.mkdtemp(prefix="scriptreel-tests-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from scriptreel import models  # noqa: F401
from scriptreel.database import Base
from scriptreel.poller import CompletionPoller
from scriptreel.schemas import ProviderResponse
from scriptreel.storage import ScriptStore, SettingsStore


class StubProvider:
    """Provider double: records calls and replays scripted status answers."""

    name = "stub"

    def __init__(self, statuses=None, start_error=None, job_id="job-1", fail_for=()):
        self.statuses = list(statuses or [ProviderResponse(job_id=job_id, status="processing")])
        self.start_error = start_error
        self.job_id = job_id
        self.fail_for = set(fail_for)
        self.start_calls = []
        self.status_calls = []

    def start_job(self, script, config):
        self.start_calls.append((script.id, config))
        if self.start_error is not None:
            raise self.start_error
        if script.id in self.fail_for:
            raise RuntimeError(f"provider refused {script.id}")
        return ProviderResponse(job_id=self.job_id, status="pending")

    def check_status(self, provider_job_id, config):
        self.status_calls.append(provider_job_id)
        answer = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


def script_row(hook="H", body="B", cta="C", platform="tiktok"):
    text = f"{hook} {body} {cta}"
    return {
        "hook": hook,
        "body": body,
        "cta": cta,
        "script_type": "product-demo",
        "platform": platform,
        "tone": "casual",
        "character_count": len(text),
        "word_count": len(text.split()),
        "estimated_duration": 1,
        "generated_batch": "batch-1",
    }


@pytest.fixture(name="session_factory")
def session_factory_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture(name="store")
def store_fixture(session_factory):
    return ScriptStore(session_factory)


@pytest.fixture(name="settings_store")
def settings_store_fixture(session_factory):
    return SettingsStore(session_factory)


@pytest.fixture(name="script")
def script_fixture(store):
    return store.create_scripts([script_row()])[0]


@pytest.fixture(name="fast_poller")
def fast_poller_fixture():
    return CompletionPoller(max_attempts=3, interval=0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("ARCADS_API_KEY", "OPENAI_BASE_URL", "OPENAI_API_KEY"):
        monkeypatch.delenv(key, raising=False)
