# models.py

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from scriptreel.database import Base

# Video job lifecycle: none -> pending -> generating -> complete | failed
VIDEO_NONE = "none"
VIDEO_PENDING = "pending"
VIDEO_GENERATING = "generating"
VIDEO_COMPLETE = "complete"
VIDEO_FAILED = "failed"

ACTIVE_VIDEO_STATUSES = (VIDEO_PENDING, VIDEO_GENERATING)

# Process roles that drive video jobs; each resumes only its own jobs after a restart
OWNER_API = "api"
OWNER_WORKER = "worker"


class Script(Base):
    """A generated marketing script and the state of its (at most one) video job."""

    __tablename__ = "scripts"

    id = Column(String, primary_key=True, index=True)
    hook = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    cta = Column(Text, nullable=False)
    script_type = Column(String, nullable=False)
    platform = Column(String, nullable=False, index=True)
    status = Column(String, default="pending", index=True)  # pending, used, archived
    tone = Column(String, nullable=False)
    character_count = Column(Integer, default=0)
    word_count = Column(Integer, default=0)
    estimated_duration = Column(Integer, default=0)
    generated_batch = Column(String, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    video_status = Column(String, default=VIDEO_NONE, index=True)
    video_provider = Column(String, nullable=True)
    video_owner = Column(String, nullable=True)
    video_job_id = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    video_error = Column(Text, nullable=True)


class AppSettings(Base):
    """Single-row table holding the runtime settings edited from the dashboard."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, default=1)
    daily_script_count = Column(Integer, default=8)
    auto_generate_enabled = Column(Boolean, default=True)
    product_features = Column(Text, default="")
    arcads_enabled = Column(Boolean, default=True)
    arcads_avatar_id = Column(String, default="")
    auto_generate_videos = Column(Boolean, default=False)
    preferred_provider = Column(String, default="arcads")
    wav2lip_enabled = Column(Boolean, default=False)
    wav2lip_api_url = Column(String, default="")
    wav2lip_avatar_image_url = Column(String, default="")
    last_updated = Column(DateTime, default=datetime.utcnow)
