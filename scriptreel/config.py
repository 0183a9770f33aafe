"""
Configuration file for the ScriptReel service.
Contains global constants, provider endpoints and the prompt template for script generation.
"""

import os

# --- Constants ---
PROJECT_ROOT = os.getcwd()
DATA_DIR = os.getenv("SCRIPTREEL_DATA_DIR", os.path.join(PROJECT_ROOT, "data"))
EXPORTS_DIR = os.path.join(DATA_DIR, "exports")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(DATA_DIR, 'scriptreel.db')}")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5000,http://127.0.0.1:5000").split(",")

# --- Video providers ---
ARCADS_API_BASE = os.getenv("ARCADS_API_BASE", "https://api.arcads.ai/v1")
PROVIDER_TIMEOUT_SECONDS = 60

VIDEO_POLL_INTERVAL_SECONDS = float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS", "10"))
VIDEO_POLL_TIMEOUT_SECONDS = float(os.getenv("VIDEO_POLL_TIMEOUT_SECONDS", "600"))
VIDEO_POLL_MAX_ATTEMPTS = max(1, int(VIDEO_POLL_TIMEOUT_SECONDS // VIDEO_POLL_INTERVAL_SECONDS))

# --- OpenAI-compatible endpoint (script generation + text-to-speech) ---
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")
OPENAI_TTS_MODEL = os.getenv("OPENAI_TTS_MODEL", "tts-1")
OPENAI_TTS_VOICE = os.getenv("OPENAI_TTS_VOICE", "alloy")

# --- Script vocabulary ---
PLATFORMS = ["twitter", "tiktok", "instagram"]
SCRIPT_TYPES = ["product-demo", "founder-story", "skeptic-to-believer", "feature-highlight"]
TONES = ["excited", "casual", "informative", "persuasive"]
SCRIPT_STATUSES = ["pending", "used", "archived"]
VIDEO_PROVIDERS = ["arcads", "wav2lip"]

DEFAULT_PRODUCT_FEATURES = "instant payments, HONEY stablecoin currency, zero fees, $BEARCO memecoin integration"
DEFAULT_DAILY_SCRIPT_COUNT = 8


def get_arcads_api_key() -> str:
    # Secrets are read on every call so a rotated key takes effect without a restart.
    return os.getenv("ARCADS_API_KEY", "")


def get_openai_credentials():
    """Returns (base_url, api_key) or None when either is missing."""
    base_url = os.getenv("OPENAI_BASE_URL", "")
    api_key = os.getenv("OPENAI_API_KEY", "")
    if not base_url or not api_key:
        return None
    return base_url.rstrip("/"), api_key


# --- Prompt Engineering Section ---

SCRIPT_PROMPT_TEMPLATE = """Generate {count} unique UGC-style video scripts for Bearo, a crypto fintech app.

Product Features: {product_features}

Requirements for each script:
- Length: 15-30 seconds when spoken (approximately 40-75 words total)
- Hook: Attention-grabbing opening line (5-15 words)
- Body: Main content explaining the benefit/feature (25-45 words)
- CTA: Clear call to action (5-15 words)
- Type: One of "product-demo", "founder-story", "skeptic-to-believer", "feature-highlight"
- Tone: One of "excited", "casual", "informative", "persuasive"

Make scripts feel authentic and casual like real user testimonials. Vary the types and tones across scripts.

Return a JSON object with a "scripts" key containing an array of script objects. Each object must have: "hook", "body", "cta", "type", and "tone" fields."""
