"""Pending change model"""

from sqlalchemy import Column, Integer, BigInteger, String, JSON
from taskboard.core.database import Base


class PendingChangeRecord(Base):
    __tablename__ = "pending_changes"

    # seq fixe l'ordre FIFO, le timestamp seul ne suffit pas (collisions à la ms)
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, nullable=False, index=True)

    entity = Column(String, nullable=False)  # "task", "section", "project", "reminder"
    operation = Column(String, nullable=False)  # "create", "update", "delete", "reorder"
    entity_id = Column(String, nullable=False, index=True)
    data = Column(JSON, nullable=True)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms
