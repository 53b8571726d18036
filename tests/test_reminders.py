"""Tests for record reminders and push subscriptions."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from pywebpush import WebPushException

from bookkeeper.models import PushSubscription, Record
from bookkeeper.services import push_service
from bookkeeper.services.reminders import (
    build_reminder_payload,
    check_and_send_record_notifications,
    mark_record_notified,
    records_needing_notification,
)

NOW = datetime(2025, 3, 10, 9, 0)


@pytest.fixture
def make_record(db, consultation, patient):
    def _make(time="09:30", **overrides):
        fields = {
            "client_id": patient.id,
            "service_id": consultation.id,
            "date": date(2025, 3, 10),
            "time": time,
            "status": "pending",
            "reminder": True,
            "patient_count": 1,
        }
        fields.update(overrides)
        record = Record(**fields)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    return _make


@pytest.fixture
def subscription(db, employee):
    sub = PushSubscription(user_id=employee.id, endpoint="https://push.example/abc", p256dh="key", auth="secret")
    db.add(sub)
    db.commit()
    db.refresh(sub)
    return sub


class FakeSender:
    """Records deliveries instead of calling a push service."""

    def __init__(self, accept=True):
        self.accept = accept
        self.sent = []

    def __call__(self, db, subscription, payload):
        self.sent.append((subscription.endpoint, payload))
        return self.accept


class TestReminderWindow:
    def test_window_edges(self, db, make_record):
        make_record(time="09:00")  # starts now
        in_one_minute = make_record(time="09:01")
        at_edge = make_record(time="10:00")
        make_record(time="10:01")  # too far ahead
        make_record(time="08:59")  # already started

        due = records_needing_notification(db, now=NOW, window_minutes=60)

        assert [r.id for r in due] == [in_one_minute.id, at_edge.id]

    def test_filters(self, db, make_record):
        make_record(reminder=False)
        make_record(status="done")
        make_record(status="canceled")
        make_record(notification_sent_at=datetime(2025, 3, 10, 8, 0))
        make_record(date=date(2025, 3, 11))
        make_record(time=None)

        assert records_needing_notification(db, now=NOW) == []

    def test_mark_notified_once(self, db, make_record):
        record = make_record()

        assert mark_record_notified(db, record.id, NOW) is True
        assert mark_record_notified(db, record.id, NOW) is False
        assert records_needing_notification(db, now=NOW) == []


class TestSendReminders:
    def test_sends_and_marks(self, db, make_record, subscription):
        record = make_record(time="09:30")
        sender = FakeSender()

        notified = check_and_send_record_notifications(db, sender=sender, now=NOW)

        assert notified == 1
        assert len(sender.sent) == 1
        endpoint, payload = sender.sent[0]
        assert endpoint == "https://push.example/abc"
        assert payload["tag"] == f"record-{record.id}"
        assert payload["body"] == "Paula Patient - Consultation at 09:30"

        db.expire_all()
        assert db.get(Record, record.id).notification_sent_at == NOW

    def test_second_run_sends_nothing(self, db, make_record, subscription):
        make_record()
        sender = FakeSender()

        check_and_send_record_notifications(db, sender=sender, now=NOW)
        check_and_send_record_notifications(db, sender=sender, now=NOW)

        assert len(sender.sent) == 1

    def test_undelivered_reminder_is_retried(self, db, make_record, subscription):
        record = make_record()

        assert check_and_send_record_notifications(db, sender=FakeSender(accept=False), now=NOW) == 0

        db.expire_all()
        assert db.get(Record, record.id).notification_sent_at is None

    def test_no_subscriptions(self, db, make_record):
        make_record()

        assert check_and_send_record_notifications(db, sender=FakeSender(), now=NOW) == 0

    def test_payload_without_client(self, db, make_record):
        record = make_record(client_id=None)

        payload = build_reminder_payload(record)

        assert payload["body"].startswith("No client - Consultation")
        assert payload["data"]["url"] == "/day/2025-03-10"


class TestPushDelivery:
    def test_disabled_without_vapid_keys(self, db, subscription, monkeypatch):
        monkeypatch.setattr(push_service, "PUSH_ENABLED", False)

        assert push_service.send_push_notification(db, subscription, {"title": "x"}) is False

    def test_gone_subscription_is_pruned(self, db, subscription, monkeypatch):
        def gone(**kwargs):
            raise WebPushException("Gone", response=SimpleNamespace(status_code=410))

        monkeypatch.setattr(push_service, "PUSH_ENABLED", True)
        monkeypatch.setattr(push_service, "webpush", gone)

        assert push_service.send_push_notification(db, subscription, {"title": "x"}) is False
        assert db.query(PushSubscription).count() == 0

    def test_transient_failure_keeps_subscription(self, db, subscription, monkeypatch):
        def unavailable(**kwargs):
            raise WebPushException("Unavailable", response=SimpleNamespace(status_code=503))

        monkeypatch.setattr(push_service, "PUSH_ENABLED", True)
        monkeypatch.setattr(push_service, "webpush", unavailable)

        assert push_service.send_push_notification(db, subscription, {"title": "x"}) is False
        assert db.query(PushSubscription).count() == 1

    def test_broadcast_counts_deliveries(self, db, subscription, employee):
        db.add(PushSubscription(user_id=employee.id, endpoint="https://push.example/def", p256dh="k", auth="a"))
        db.commit()

        assert push_service.broadcast(db, {"title": "x"}, sender=FakeSender()) == 2
        assert push_service.broadcast(db, {"title": "x"}, sender=FakeSender(accept=False)) == 0


class TestPushApi:
    SUBSCRIPTION = {"endpoint": "https://push.example/xyz", "keys": {"p256dh": "p", "auth": "a"}}

    def test_public_key_is_public(self, client):
        response = client.get("/push/public-key")

        assert response.status_code == 200
        assert "publicKey" in response.json()

    def test_subscribe_is_idempotent(self, client, db, employee_headers):
        first = client.post("/push/subscribe", json=self.SUBSCRIPTION, headers=employee_headers)
        second = client.post("/push/subscribe", json=self.SUBSCRIPTION, headers=employee_headers)

        assert first.json()["id"] == second.json()["id"]
        assert db.query(PushSubscription).count() == 1

    def test_subscribe_requires_keys(self, client, employee_headers):
        response = client.post("/push/subscribe", json={"endpoint": "https://push.example/x"}, headers=employee_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid subscription data"

    def test_unsubscribe(self, client, db, employee_headers):
        client.post("/push/subscribe", json=self.SUBSCRIPTION, headers=employee_headers)

        response = client.request(
            "DELETE", "/push/unsubscribe", json={"endpoint": self.SUBSCRIPTION["endpoint"]}, headers=employee_headers
        )

        assert response.status_code == 200
        assert db.query(PushSubscription).count() == 0

    def test_unsubscribe_requires_endpoint(self, client, employee_headers):
        response = client.request("DELETE", "/push/unsubscribe", json={}, headers=employee_headers)

        assert response.status_code == 400
