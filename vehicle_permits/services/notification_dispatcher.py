# vehicle_permits/services/notification_dispatcher.py
"""
Notification dispatcher — renders and delivers the message tied to a lifecycle event.

  submission → notify_hr        (one `to_hr` row)
  decision   → notify_employee  (one `to_employee` row)

Each call commits a `pending` Notification, tries the gateway once under a
timeout, then commits the outcome (`sent` + sent_at, or `failed` + reason).
Delivery failure is a normal outcome: it is recorded and logged, never raised.

DISPATCH_MODE=inline awaits delivery in the caller's request.
DISPATCH_MODE=async schedules it as a background task with its own DB session.
"""

import asyncio
from typing import Optional
from sqlalchemy.orm import Session
from vehicle_permits.config import settings
from vehicle_permits.database import SessionLocal
from vehicle_permits.models.notification import (
    Notification,
    KIND_TO_HR,
    KIND_TO_EMPLOYEE,
    DELIVERY_PENDING,
    DELIVERY_SENT,
    DELIVERY_FAILED,
)
from vehicle_permits.models.permit import Permit, STATUS_APPROVED
from vehicle_permits.services.errors import DeliveryFailed
from vehicle_permits.services.notification_gateway import DeliveryResult, NotificationGateway
from vehicle_permits.utils.logger import get_logger, DELIVERY_LOGGER
from vehicle_permits.utils.timeutil import utcnow, DISPLAY_FORMAT

logger = get_logger(__name__)
delivery_log = get_logger(DELIVERY_LOGGER)

# Strong references so pending background dispatches are not garbage-collected
_background_tasks: set = set()


# ── Message templates ────────────────────────────────────────────────────────

def _window(permit: Permit) -> str:
    return f"{permit.usage_start.strftime(DISPLAY_FORMAT)} - {permit.usage_end.strftime(DISPLAY_FORMAT)}"


def review_url(permit: Permit) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{settings.HR_REVIEW_PATH}?permit={permit.id}"


def render_hr_message(permit: Permit) -> str:
    employee = permit.employee
    return (
        "🚗 *New Vehicle Permit Request*\n\n"
        f"📋 *Employee:* {employee.name} ({employee.employee_code})\n"
        f"🏢 *Department:* {employee.department}\n"
        f"🚙 *Vehicle:* {permit.vehicle_type}\n"
        f"🔢 *License:* {permit.license_plate}\n"
        f"📅 *Duration:* {_window(permit)}\n"
        f"📝 *Purpose:* {permit.purpose or 'Not specified'}\n\n"
        f"🔗 *Review & Approve:* {review_url(permit)}\n\n"
        "Please review and approve/reject this request."
    )


def render_employee_message(permit: Permit) -> str:
    approved = permit.status == STATUS_APPROVED
    emoji = "✅" if approved else "❌"
    lines = (
        f"{emoji} *Vehicle Permit {permit.status.capitalize()}*\n\n"
        f"📋 *Request ID:* #{permit.id}\n"
        f"🚙 *Vehicle:* {permit.vehicle_type}\n"
        f"🔢 *License:* {permit.license_plate}\n"
        f"📅 *Duration:* {_window(permit)}\n\n"
    )
    if permit.hr_comments:
        lines += f"💬 *HR Comments:* {permit.hr_comments}\n\n"
    if approved:
        lines += "🎉 Your vehicle permit has been approved! You can proceed with your vehicle usage as planned."
    else:
        lines += "❗ Your vehicle permit has been rejected. Please contact HR for more information."
    return lines


def employee_recipient(permit: Permit) -> str:
    return permit.employee.phone or settings.DEFAULT_EMPLOYEE_RECIPIENT


# ── Delivery ─────────────────────────────────────────────────────────────────

async def _attempt_delivery(gateway: NotificationGateway, recipient: str, message: str) -> None:
    """One bounded gateway call. Raises DeliveryFailed on any non-delivery."""
    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(gateway.send, recipient, message),
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        raise DeliveryFailed("timeout")
    except Exception as e:
        # Gateways should return failures, but a broken client must not escape the side channel
        logger.error(f"Gateway {getattr(gateway, 'name', gateway)} raised: {e}", exc_info=True)
        raise DeliveryFailed(f"gateway error: {e}")

    if not isinstance(result, DeliveryResult):
        logger.error(f"Gateway {getattr(gateway, 'name', gateway)} returned {result!r}")
        raise DeliveryFailed(f"gateway error: unexpected result {type(result).__name__}")
    if not result.delivered:
        raise DeliveryFailed(result.reason or "unknown delivery failure")


async def _deliver(db: Session, permit: Permit, kind: str, recipient: str, message: str,
                   gateway: NotificationGateway) -> Notification:
    notification = Notification(
        permit_id=permit.id,
        recipient=recipient,
        kind=kind,
        message=message,
        status=DELIVERY_PENDING,
        created_at=utcnow(),
    )
    db.add(notification)
    db.commit()

    try:
        await _attempt_delivery(gateway, recipient, message)
    except DeliveryFailed as e:
        notification.status = DELIVERY_FAILED
        notification.error_message = e.message
        delivery_log.error(
            f"[NOTIFY] #{notification.id} {kind} for permit #{permit.id} to {recipient} failed: {e.message}"
        )
    else:
        notification.status = DELIVERY_SENT
        notification.sent_at = utcnow()
        delivery_log.info(f"[NOTIFY] #{notification.id} {kind} for permit #{permit.id} sent to {recipient}")

    db.commit()
    db.refresh(notification)
    return notification


async def notify_hr(db: Session, permit: Permit, gateway: NotificationGateway) -> Notification:
    """Tell HR about a new submission."""
    return await _deliver(db, permit, KIND_TO_HR, settings.HR_NOTIFICATION_RECIPIENT,
                          render_hr_message(permit), gateway)


async def notify_employee(db: Session, permit: Permit, gateway: NotificationGateway) -> Notification:
    """Tell the employee about the decision on their permit."""
    return await _deliver(db, permit, KIND_TO_EMPLOYEE, employee_recipient(permit),
                          render_employee_message(permit), gateway)


_NOTIFIERS = {
    KIND_TO_HR: notify_hr,
    KIND_TO_EMPLOYEE: notify_employee,
}


async def _dispatch_in_background(kind: str, permit_id: int, gateway: NotificationGateway):
    db = SessionLocal()
    try:
        permit = db.get(Permit, permit_id)
        if permit is None:
            logger.warning(f"[NOTIFY] Permit #{permit_id} vanished before {kind} dispatch")
            return
        await _NOTIFIERS[kind](db, permit, gateway)
    except Exception as e:
        db.rollback()
        logger.error(f"[NOTIFY] Background {kind} dispatch for permit #{permit_id} crashed: {e}", exc_info=True)
    finally:
        db.close()


async def dispatch(kind: str, db: Session, permit: Permit,
                   gateway: NotificationGateway) -> Optional[Notification]:
    """
    Run the notifier for `kind` according to DISPATCH_MODE.
    Returns the final Notification inline, or None once the background task is scheduled.
    """
    if settings.is_async_dispatch:
        task = asyncio.create_task(_dispatch_in_background(kind, permit.id, gateway))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return None
    return await _NOTIFIERS[kind](db, permit, gateway)


async def drain_background_dispatches():
    """Wait for scheduled background dispatches (shutdown hook and tests)."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
