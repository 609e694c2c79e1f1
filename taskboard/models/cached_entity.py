"""Cached entity model"""

from sqlalchemy import Column, String, DateTime, JSON
from datetime import datetime, timezone
from taskboard.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CachedEntity(Base):
    __tablename__ = "cached_entities"

    # une partition par type d'entité: task, section, project, reminder
    entity = Column(String, primary_key=True)
    id = Column(String, primary_key=True)

    data = Column(JSON, nullable=False)  # ligne telle que renvoyée par le backend
    cached_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
