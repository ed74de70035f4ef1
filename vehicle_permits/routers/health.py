# vehicle_permits/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB and the notification wiring in use.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from vehicle_permits.database import get_db
from vehicle_permits.config import settings
from vehicle_permits.models.notification import Notification, DELIVERY_FAILED
from vehicle_permits.utils.timeutil import utcnow

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Dispatch mode, gateway kind and the count of failed deliveries
    """
    result = {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "notifications": {
            "dispatch_mode": settings.DISPATCH_MODE,
            "gateway": settings.NOTIFICATION_GATEWAY,
        },
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["notifications"]["failed"] = (
            db.query(Notification).filter(Notification.status == DELIVERY_FAILED).count()
        )
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
