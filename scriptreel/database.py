# database.py

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from scriptreel.config import DATABASE_URL, DATA_DIR

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    os.makedirs(DATA_DIR, exist_ok=True)
    # Sessions are opened from the event loop thread and from FastAPI's threadpool
    connect_args = {"check_same_thread": False}

# Create the engine to connect to the database
engine = create_engine(DATABASE_URL, connect_args=connect_args)

# Create a session factory; rows stay readable after the session that loaded them closes
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

# Base class for our database models
Base = declarative_base()
