"""
Audit log model for authentication events
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from app.database import Base

class ActivityLog(Base):
    """One row per register, login, logout or staff creation attempt"""
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    event = Column(String(50), nullable=False, index=True)
    endpoint = Column(String(255), nullable=False)
    method = Column(String(10), nullable=False)
    status_code = Column(Integer, nullable=False)
    user_id = Column(Integer, nullable=True, index=True)
    email = Column(String(100), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ActivityLog(id={self.id}, event='{self.event}', endpoint='{self.endpoint}', status={self.status_code})>"
