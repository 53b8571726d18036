"""Push router - Web Push subscription management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_capability
from ...config import VAPID_PUBLIC_KEY
from ...database import get_db
from ...models import User
from ...shared.errors import ValidationError
from ...shared.permissions import Capability
from .repository import PushRepository
from .schemas import PushSubscribe, PushUnsubscribe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/push", tags=["Push"])


@router.get("/public-key")
async def get_public_key():
    """VAPID application server key for PushManager.subscribe (empty when push is disabled)"""
    return {"publicKey": VAPID_PUBLIC_KEY or ""}


@router.post("/subscribe")
async def subscribe(
    data: PushSubscribe,
    current_user: User = Depends(require_capability(Capability.MANAGE_PUSH)),
    db: Session = Depends(get_db),
):
    if not data.endpoint or not data.keys or not data.keys.p256dh or not data.keys.auth:
        raise ValidationError("Invalid subscription data")

    subscription = PushRepository.save_subscription(
        db, current_user.id, data.endpoint, data.keys.p256dh, data.keys.auth
    )
    logger.info(f"🔔 User {current_user.id} subscribed to push ({subscription.id})")
    return {"success": True, "id": subscription.id}


@router.delete("/unsubscribe")
async def unsubscribe(
    data: PushUnsubscribe,
    current_user: User = Depends(require_capability(Capability.MANAGE_PUSH)),
    db: Session = Depends(get_db),
):
    if not data.endpoint:
        raise ValidationError("Endpoint required")

    PushRepository.delete_by_endpoint(db, data.endpoint)
    logger.info(f"🔕 User {current_user.id} unsubscribed from push")
    return {"success": True}
