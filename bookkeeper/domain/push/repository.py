"""Push subscription repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PushSubscription


class PushRepository:
    """Repository for push subscription database operations"""

    @staticmethod
    def get_by_endpoint(db: Session, endpoint: str) -> Optional[PushSubscription]:
        return db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()

    @staticmethod
    def get_all(db: Session) -> list[PushSubscription]:
        return db.query(PushSubscription).order_by(PushSubscription.id).all()

    @staticmethod
    def save_subscription(db: Session, user_id: int, endpoint: str, p256dh: str, auth: str) -> PushSubscription:
        """Insert, or refresh keys and owner when the endpoint is already known"""
        subscription = PushRepository.get_by_endpoint(db, endpoint)
        if subscription:
            subscription.user_id = user_id
            subscription.p256dh = p256dh
            subscription.auth = auth
        else:
            subscription = PushSubscription(user_id=user_id, endpoint=endpoint, p256dh=p256dh, auth=auth)
            db.add(subscription)

        db.commit()
        db.refresh(subscription)
        return subscription

    @staticmethod
    def delete_by_endpoint(db: Session, endpoint: str) -> int:
        deleted = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).delete()
        db.commit()
        return deleted
