"""
Web Push delivery via pywebpush.
Push is disabled (and logged once at import) when VAPID keys are not configured.
"""

import json
import logging

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from ..config import VAPID_PRIVATE_KEY, VAPID_PUBLIC_KEY, VAPID_SUBJECT
from ..domain.push.repository import PushRepository
from ..models import PushSubscription

logger = logging.getLogger(__name__)

# Endpoint gone for good; the subscription is deleted
STALE_SUBSCRIPTION_STATUSES = {404, 410}

PUSH_ENABLED = bool(VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY)
if PUSH_ENABLED:
    logger.info("✅ VAPID keys configured, push notifications enabled")
else:
    logger.warning("⚠️ VAPID keys not configured. Push notifications disabled.")


def send_push_notification(db: Session, subscription: PushSubscription, payload: dict) -> bool:
    """
    Deliver one notification.

    Returns:
        True if the push service accepted it, False otherwise
    """
    if not PUSH_ENABLED:
        return False

    try:
        webpush(
            subscription_info={
                "endpoint": subscription.endpoint,
                "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
            },
            data=json.dumps(payload),
            vapid_private_key=VAPID_PRIVATE_KEY,
            vapid_claims={"sub": VAPID_SUBJECT},
        )
        return True
    except WebPushException as e:
        status = e.response.status_code if e.response is not None else None
        logger.error(f"❌ Push delivery failed ({status}) for subscription {subscription.id}: {e}")
        if status in STALE_SUBSCRIPTION_STATUSES:
            PushRepository.delete_by_endpoint(db, subscription.endpoint)
            logger.info(f"🧹 Removed stale push subscription {subscription.id}")
        return False


def broadcast(db: Session, payload: dict, sender=send_push_notification) -> int:
    """Send a payload to every stored subscription; returns the number delivered"""
    sent = 0
    for subscription in PushRepository.get_all(db):
        if sender(db, subscription, payload):
            sent += 1
    return sent
