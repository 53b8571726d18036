"""Service catalog repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Record, Service


class ServiceRepository:
    @staticmethod
    def get_services(db: Session) -> list[Service]:
        return db.query(Service).order_by(Service.name).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)

        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def count_records(db: Session, service_id: int) -> int:
        return db.query(func.count(Record.id)).filter(Record.service_id == service_id).scalar() or 0

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
