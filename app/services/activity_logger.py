"""
Audit trail for authentication events
"""

import logging
from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityLogger:
    """Service for recording register/login/logout attempts"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        event: str,
        request: Request,
        status_code: int,
        user_id: Optional[int] = None,
        email: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Persist one audit row; a failure here never fails the request"""
        activity_log = ActivityLog(
            event=event,
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            user_id=user_id,
            email=email,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            error_message=error_message
        )

        try:
            self.db.add(activity_log)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to log activity {event}: {e}")
            self.db.rollback()
            return None

        return activity_log

    def get_recent_activities(self, limit: int = 100, event: Optional[str] = None) -> list[ActivityLog]:
        """Get recent activities, newest first"""
        query = self.db.query(ActivityLog)
        if event:
            query = query.filter(ActivityLog.event == event)
        return query.order_by(ActivityLog.id.desc()).limit(limit).all()
