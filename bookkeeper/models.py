from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Record status workflow: pending → done | canceled
RECORD_STATUS_PENDING = "pending"
RECORD_STATUS_DONE = "done"
RECORD_STATUS_CANCELED = "canceled"
RECORD_STATUSES = (RECORD_STATUS_PENDING, RECORD_STATUS_DONE, RECORD_STATUS_CANCELED)

INVENTORY_CHANGE_MANUAL = "manual"
INVENTORY_CHANGE_PURCHASE = "purchase"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(20), default="employee", nullable=False)  # admin, manager, employee
    full_name = Column(String(255), nullable=False)
    login = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    completions = relationship("RecordCompletion", back_populates="employee")
    push_subscriptions = relationship(
        "PushSubscription", back_populates="user", cascade="all, delete-orphan"
    )


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    records = relationship("Record", back_populates="client")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)  # Whole currency units, no fractions

    records = relationship("Record", back_populates="service")


class Record(Base):
    """An appointment booked for a service on a date, with a patient capacity"""

    __tablename__ = "records"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    # Legacy single assignee; work is attributed through completions instead
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=True)  # HH:MM format
    status = Column(String(20), default=RECORD_STATUS_PENDING, nullable=False, index=True)
    reminder = Column(Boolean, default=False, nullable=False)
    patient_count = Column(Integer, default=1, nullable=False)
    notification_sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="records")
    service = relationship("Service", back_populates="records")
    completions = relationship(
        "RecordCompletion",
        back_populates="record",
        order_by="RecordCompletion.id",
    )
    incomes = relationship("Income", back_populates="record")

    __table_args__ = (CheckConstraint("patient_count >= 1", name="ck_records_patient_count"),)


class RecordCompletion(Base):
    """Append-only log of how many patients an employee served on a record"""

    __tablename__ = "record_completions"

    id = Column(Integer, primary_key=True, index=True)
    record_id = Column(Integer, ForeignKey("records.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    patient_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    record = relationship("Record", back_populates="completions")
    employee = relationship("User", back_populates="completions")


class Income(Base):
    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=True)
    name = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False)
    # NULL for manual entries; set for the single income generated from a record
    record_id = Column(Integer, ForeignKey("records.id"), nullable=True)
    reminder = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    record = relationship("Record", back_populates="incomes")

    __table_args__ = (Index("uq_incomes_record_id", "record_id", unique=True),)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=True)
    name = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False)
    reminder = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, default=0, nullable=False)
    unit = Column(String(50), nullable=False, default="pcs")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    history = relationship(
        "InventoryHistory",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="InventoryHistory.id.desc()",
    )


class InventoryHistory(Base):
    __tablename__ = "inventory_history"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)
    change = Column(Integer, nullable=False)  # Signed quantity delta
    change_type = Column(String(20), nullable=False, default=INVENTORY_CHANGE_MANUAL)
    # Set for purchases; cleared when the expense is deleted
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="SET NULL"), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    item = relationship("InventoryItem", back_populates="history")
    expense = relationship("Expense")


class PushSubscription(Base):
    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    endpoint = Column(Text, unique=True, nullable=False)
    p256dh = Column(Text, nullable=False)
    auth = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="push_subscriptions")
