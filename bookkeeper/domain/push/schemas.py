"""Push subscription schemas (browser PushSubscription JSON)"""

from typing import Optional

from pydantic import BaseModel


class SubscriptionKeys(BaseModel):
    p256dh: Optional[str] = None
    auth: Optional[str] = None


class PushSubscribe(BaseModel):
    endpoint: Optional[str] = None
    keys: Optional[SubscriptionKeys] = None


class PushUnsubscribe(BaseModel):
    endpoint: Optional[str] = None
