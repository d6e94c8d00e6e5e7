from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from app.db.base import Base


class TaskRecord(Base):
    __tablename__ = "tasks"

    # slugid, also the create-once guard
    task_id = Column(String(22), primary_key=True)

    # SHA-256 of the canonical form, compared on repeated creates
    fingerprint = Column(String(64), nullable=False)

    # The validated definition exactly as returned by task(taskId)
    definition = Column(Text, nullable=False)

    # Expiry sweeps select on this
    expires = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
