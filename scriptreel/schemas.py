"""
Pydantic models for data validation in the ScriptReel service.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Platform = Literal["twitter", "tiktok", "instagram"]
ScriptStatus = Literal["pending", "used", "archived"]
VideoStatus = Literal["none", "pending", "generating", "complete", "failed"]
ProviderName = Literal["arcads", "wav2lip"]
ProviderJobStatus = Literal["pending", "processing", "completed", "failed"]


# --- Provider contract ---

class ProviderResponse(BaseModel):
    """Normalized answer from any video provider."""
    job_id: str
    status: ProviderJobStatus
    result_url: Optional[str] = None
    error: Optional[str] = None


class ArcadsConfig(BaseModel):
    api_key: str = ""
    avatar_id: str = ""
    api_base: str = "https://api.arcads.ai/v1"


class TTSCredentials(BaseModel):
    base_url: str
    api_key: str
    model: str = "tts-1"
    voice: str = "alloy"


class Wav2LipConfig(BaseModel):
    api_url: str = ""
    avatar_image_url: str = ""
    tts: Optional[TTSCredentials] = None


# --- Scripts ---

class ScriptOut(BaseModel):
    """A stored script as returned to the dashboard."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    hook: str
    body: str
    cta: str
    script_type: str
    platform: str
    status: str
    tone: str
    character_count: int
    word_count: int
    estimated_duration: int
    generated_batch: Optional[str] = None
    created_at: datetime
    video_status: str
    video_provider: Optional[str] = None
    video_job_id: Optional[str] = None
    video_url: Optional[str] = None
    video_error: Optional[str] = None


class ScriptStatusUpdate(BaseModel):
    status: ScriptStatus


class GenerationRequest(BaseModel):
    """Request model for generating a batch of scripts."""
    product_features: str = Field(min_length=1)
    count: int = Field(ge=1, le=20)
    platforms: List[Platform] = Field(min_length=1)


class GenerationResponse(BaseModel):
    success: bool
    scripts: List[ScriptOut]
    batch_id: str
    message: Optional[str] = None
    videos_started: int = 0


class StatsResponse(BaseModel):
    total_scripts: int
    pending_scripts: int
    used_scripts: int
    archived_scripts: int
    scripts_today: int
    last_generation: Optional[datetime] = None
    videos_generating: int
    videos_complete: int
    videos_failed: int


class TriggerResponse(BaseModel):
    """Response when queueing the scheduled generation job by hand."""
    task_id: str
    status: str  # e.g., "queued"


# --- Videos ---

class VideoRequest(BaseModel):
    provider: Optional[ProviderName] = None
    avatar_image_url: Optional[str] = None


class VideoStartResponse(BaseModel):
    """Acknowledgement that the provider accepted the job; completion is observed by polling."""
    started: bool
    job_id: Optional[str] = None


class VideoJobResponse(BaseModel):
    script_id: str
    status: VideoStatus
    provider: Optional[str] = None
    provider_job_id: Optional[str] = None
    result_url: Optional[str] = None
    error: Optional[str] = None


class ProviderAvailability(BaseModel):
    configured: bool
    enabled: Optional[bool] = None


# --- Settings ---

class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily_script_count: int
    auto_generate_enabled: bool
    product_features: str
    arcads_enabled: bool
    arcads_avatar_id: str
    auto_generate_videos: bool
    preferred_provider: str
    wav2lip_enabled: bool
    wav2lip_api_url: str
    wav2lip_avatar_image_url: str
    last_updated: Optional[datetime] = None


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their stored value."""
    daily_script_count: Optional[int] = Field(default=None, ge=1, le=20)
    auto_generate_enabled: Optional[bool] = None
    product_features: Optional[str] = None
    arcads_enabled: Optional[bool] = None
    arcads_avatar_id: Optional[str] = None
    auto_generate_videos: Optional[bool] = None
    preferred_provider: Optional[ProviderName] = None
    wav2lip_enabled: Optional[bool] = None
    wav2lip_api_url: Optional[str] = None
    wav2lip_avatar_image_url: Optional[str] = None

    @field_validator("wav2lip_api_url", "wav2lip_avatar_image_url")
    @classmethod
    def check_url(cls, value):
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL or empty")
        return value
