import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scriptreel.config import CORS_ORIGINS, EXPORTS_DIR
from scriptreel.database import Base, engine
from scriptreel.dependencies import get_orchestrator
from scriptreel.routers import scripts, settings, videos

# --------------------------------------------------------------------------
# --- Configuration & Setup ---
# --------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

app = FastAPI(
    title="ScriptReel",
    description="Generates short marketing scripts on a schedule and renders them into lip-synced videos."
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    Base.metadata.create_all(bind=engine)
    os.makedirs(EXPORTS_DIR, exist_ok=True)
    # Jobs left in flight by a previous process get their pollers back
    await get_orchestrator().resume_active_jobs()


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "scriptreel"}


app.include_router(scripts.router)
app.include_router(videos.router)
app.include_router(settings.router)
