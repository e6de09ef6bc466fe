"""Persistence for training records."""
from .session import Base, SessionLocal, engine, init_db
from .models import UserTraining

__all__ = ["Base", "SessionLocal", "engine", "init_db", "UserTraining"]
