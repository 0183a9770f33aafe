"""
Persistence layer for scripts, their video jobs and the runtime settings.
"""

import csv
import io
import logging
import os
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_

from scriptreel.database import SessionLocal
from scriptreel.models import (
    ACTIVE_VIDEO_STATUSES,
    VIDEO_COMPLETE,
    VIDEO_FAILED,
    VIDEO_NONE,
    VIDEO_PENDING,
    AppSettings,
    Script,
)
from scriptreel.config import DEFAULT_DAILY_SCRIPT_COUNT, DEFAULT_PRODUCT_FEATURES

CSV_HEADERS = [
    "ID", "Date", "Hook", "Body", "CTA", "Type", "Platform", "Status",
    "Character Count", "Duration (s)", "Tone", "Word Count",
]


class ScriptStore:
    """Scripts plus the authoritative record of each script's video job."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    # --- scripts ---

    def list_scripts(self) -> List[Script]:
        with self.session_factory() as db:
            return db.query(Script).order_by(Script.created_at.desc()).all()

    def recent_scripts(self, limit: int = 10) -> List[Script]:
        with self.session_factory() as db:
            return db.query(Script).order_by(Script.created_at.desc()).limit(limit).all()

    def get_script(self, script_id: str) -> Optional[Script]:
        with self.session_factory() as db:
            return db.query(Script).filter(Script.id == script_id).first()

    def create_scripts(self, items: Iterable[Dict]) -> List[Script]:
        now = datetime.utcnow()
        scripts = [
            Script(id=str(uuid.uuid4()), created_at=now, status="pending", video_status=VIDEO_NONE, **item)
            for item in items
        ]
        with self.session_factory() as db:
            db.add_all(scripts)
            db.commit()
        logging.info(f"Stored {len(scripts)} scripts")
        return scripts

    def update_script_status(self, script_id: str, status: str) -> Optional[Script]:
        with self.session_factory() as db:
            script = db.query(Script).filter(Script.id == script_id).first()
            if script is None:
                return None
            script.status = status
            db.commit()
            return script

    def delete_script(self, script_id: str) -> bool:
        with self.session_factory() as db:
            deleted = db.query(Script).filter(Script.id == script_id).delete(synchronize_session=False)
            db.commit()
            return deleted > 0

    # --- video jobs ---

    def claim_video_job(self, script_id: str, provider: str, owner: Optional[str] = None) -> bool:
        """
        Moves a script to `pending` in one conditional UPDATE.
        Returns False when the script is missing or already has an active job.
        `owner` names the process role that will drive the job (api or worker).
        """
        with self.session_factory() as db:
            claimed = (
                db.query(Script)
                .filter(Script.id == script_id, Script.video_status.not_in(ACTIVE_VIDEO_STATUSES))
                .update(
                    {
                        Script.video_status: VIDEO_PENDING,
                        Script.video_provider: provider,
                        Script.video_owner: owner,
                        Script.video_job_id: None,
                        Script.video_url: None,
                        Script.video_error: None,
                    },
                    synchronize_session=False,
                )
            )
            db.commit()
            return claimed == 1

    def set_video_status(
        self,
        script_id: str,
        status: str,
        result_url: Optional[str] = None,
        provider_job_id: Optional[str] = None,
        error: Optional[str] = None,
        expected_status: Optional[str] = None,
    ) -> Optional[Script]:
        """
        Writes a video status. With `expected_status` the write is a single conditional UPDATE
        that only applies while the row is still in that status; otherwise None is returned.
        """
        values = {
            Script.video_status: status,
            Script.video_url: result_url if status == VIDEO_COMPLETE else None,
            Script.video_job_id: provider_job_id,
            Script.video_error: error if status == VIDEO_FAILED else None,
        }
        with self.session_factory() as db:
            query = db.query(Script).filter(Script.id == script_id)
            if expected_status is not None:
                query = query.filter(Script.video_status == expected_status)
            updated = query.update(values, synchronize_session=False)
            db.commit()
            if not updated:
                if expected_status is not None:
                    logging.warning(f"Video status {status} for script {script_id} skipped: no longer {expected_status}")
                else:
                    logging.warning(f"Video status update for unknown script {script_id}")
                return None
            return db.query(Script).filter(Script.id == script_id).first()

    def active_video_scripts(self, owner: Optional[str] = None) -> List[Script]:
        with self.session_factory() as db:
            query = db.query(Script).filter(Script.video_status.in_(ACTIVE_VIDEO_STATUSES))
            if owner is not None:
                query = query.filter(or_(Script.video_owner == owner, Script.video_owner.is_(None)))
            return query.all()

    # --- reporting ---

    def get_stats(self) -> Dict:
        scripts = self.list_scripts()
        today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)

        def count(predicate):
            return sum(1 for s in scripts if predicate(s))

        return {
            "total_scripts": len(scripts),
            "pending_scripts": count(lambda s: s.status == "pending"),
            "used_scripts": count(lambda s: s.status == "used"),
            "archived_scripts": count(lambda s: s.status == "archived"),
            "scripts_today": count(lambda s: s.created_at >= today),
            "last_generation": scripts[0].created_at if scripts else None,
            "videos_generating": count(lambda s: s.video_status in ACTIVE_VIDEO_STATUSES),
            "videos_complete": count(lambda s: s.video_status == VIDEO_COMPLETE),
            "videos_failed": count(lambda s: s.video_status == VIDEO_FAILED),
        }

    def export_csv(self, export_dir: Optional[str] = None) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for s in self.list_scripts():
            writer.writerow([
                s.id, s.created_at.isoformat(), s.hook, s.body, s.cta, s.script_type, s.platform,
                s.status, s.character_count, s.estimated_duration, s.tone, s.word_count,
            ])
        content = buffer.getvalue()

        if export_dir:
            os.makedirs(export_dir, exist_ok=True)
            path = os.path.join(export_dir, f"scripts-{datetime.utcnow().strftime('%Y-%m-%d')}.csv")
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            logging.info(f"Exported scripts to {path}")
        return content


class SettingsStore:
    """Runtime settings; read fresh on every request, never cached."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_settings(self) -> AppSettings:
        with self.session_factory() as db:
            settings = db.get(AppSettings, 1)
            if settings is None:
                settings = AppSettings(
                    id=1,
                    daily_script_count=DEFAULT_DAILY_SCRIPT_COUNT,
                    auto_generate_enabled=True,
                    product_features=DEFAULT_PRODUCT_FEATURES,
                    arcads_enabled=True,
                    arcads_avatar_id="",
                    auto_generate_videos=False,
                    preferred_provider="arcads",
                    wav2lip_enabled=False,
                    wav2lip_api_url="",
                    wav2lip_avatar_image_url="",
                    last_updated=datetime.utcnow(),
                )
                db.add(settings)
                db.commit()
            return settings

    def update_settings(self, changes: Dict) -> AppSettings:
        self.get_settings()
        with self.session_factory() as db:
            settings = db.get(AppSettings, 1)
            for key, value in changes.items():
                if value is not None and hasattr(settings, key):
                    setattr(settings, key, value)
            settings.last_updated = datetime.utcnow()
            db.commit()
            return settings
