"""
Record reminders.
Finds today's pending records that start soon and pushes a reminder once per record.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ..config import REMINDER_WINDOW_MINUTES
from ..models import RECORD_STATUS_PENDING, Record
from .push_service import broadcast, send_push_notification

logger = logging.getLogger(__name__)


def _minutes_of_day(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def records_needing_notification(
    db: Session, now: Optional[datetime] = None, window_minutes: int = REMINDER_WINDOW_MINUTES
) -> list[Record]:
    """
    Today's pending records with a reminder, not yet notified, whose start time
    is more than 0 and at most window_minutes away.
    """
    now = now or datetime.now()
    candidates = (
        db.query(Record)
        .options(joinedload(Record.client), joinedload(Record.service))
        .filter(
            Record.date == now.date(),
            Record.reminder.is_(True),
            Record.status == RECORD_STATUS_PENDING,
            Record.notification_sent_at.is_(None),
            Record.time.isnot(None),
        )
        .order_by(Record.time, Record.id)
        .all()
    )

    current = now.hour * 60 + now.minute
    return [r for r in candidates if 0 < _minutes_of_day(r.time) - current <= window_minutes]


def mark_record_notified(db: Session, record_id: int, now: Optional[datetime] = None) -> bool:
    """Stamp notification_sent_at unless already set; True if this call stamped it"""
    updated = (
        db.query(Record)
        .filter(Record.id == record_id, Record.notification_sent_at.is_(None))
        .update({Record.notification_sent_at: now or datetime.now()}, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def build_reminder_payload(record: Record) -> dict:
    client_name = record.client.full_name if record.client else "No client"
    day = record.date.isoformat()
    return {
        "title": "Upcoming appointment",
        "body": f"{client_name} - {record.service.name} at {record.time}",
        "icon": "/icon-192.png",
        "badge": "/icon-192.png",
        "tag": f"record-{record.id}",
        "data": {"recordId": record.id, "date": day, "url": f"/day/{day}"},
    }


def check_and_send_record_notifications(
    db: Session, sender=send_push_notification, now: Optional[datetime] = None
) -> int:
    """
    Push reminders for records starting soon.
    A record is marked notified only when at least one device received it,
    so it is retried on the next run otherwise. Returns records notified.
    """
    records = records_needing_notification(db, now)
    if not records:
        return 0

    logger.info(f"🔔 {len(records)} records need a reminder")
    notified = 0
    for record in records:
        sent = broadcast(db, build_reminder_payload(record), sender=sender)
        if sent and mark_record_notified(db, record.id, now):
            notified += 1
            logger.info(f"✅ Reminder for record {record.id} sent to {sent} devices")
        elif not sent:
            logger.warning(f"⚠️ Reminder for record {record.id} reached no device")
    return notified
