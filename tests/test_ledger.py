"""Tests for incomes, expenses and record-generated income."""

from bookkeeper.domain.ledger.service import LedgerService, record_income_name
from bookkeeper.models import Income, Record


class TestRecordIncome:
    """ensure_record_income is idempotent per record."""

    def test_second_call_returns_existing_income(self, db, create_record):
        booked = create_record(patientCount=2)
        record = db.get(Record, booked["id"])
        ledger = LedgerService(db)

        first, created_first = ledger.ensure_record_income(record)
        db.commit()
        second, created_second = ledger.ensure_record_income(record)
        db.commit()

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert db.query(Income).filter(Income.record_id == record.id).count() == 1

    def test_amount_is_price_times_capacity(self, db, create_record):
        booked = create_record(patientCount=5)
        record = db.get(Record, booked["id"])

        income, _ = LedgerService(db).ensure_record_income(record)

        assert income.amount == 500
        assert income.name == "Consultation (5 pat.)"
        assert income.reminder is False

    def test_income_name_format(self):
        assert record_income_name("X-ray", 2) == "X-ray (2 pat.)"


class TestIncomes:
    """Manual incomes through the API."""

    def test_create_and_list(self, client, admin_headers):
        response = client.post(
            "/incomes",
            json={"date": "2025-03-10", "time": "09:15", "name": "  Donation ", "amount": 250},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Donation"
        assert response.json()["recordId"] is None

        listed = client.get("/incomes", params={"date": "2025-03-10"}, headers=admin_headers).json()
        assert [i["amount"] for i in listed] == [250]
        assert client.get("/incomes", params={"date": "2025-03-11"}, headers=admin_headers).json() == []

    def test_listing_names_completing_employees(self, client, create_record, employee_headers, employee2_headers, admin_headers):
        record = create_record(patientCount=2)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee_headers)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee2_headers)

        listed = client.get("/incomes", params={"date": "2025-03-10"}, headers=admin_headers).json()

        assert len(listed) == 1
        assert listed[0]["recordId"] == record["id"]
        assert "Nina Nurse" in listed[0]["employeeName"]
        assert "Oleg Orderly" in listed[0]["employeeName"]

    def test_negative_amount_rejected(self, client, admin_headers):
        response = client.post(
            "/incomes", json={"date": "2025-03-10", "name": "Refund", "amount": -5}, headers=admin_headers
        )

        assert response.status_code == 422

    def test_bad_date_rejected(self, client, admin_headers):
        response = client.post(
            "/incomes", json={"date": "2025-02-30", "name": "Tip", "amount": 5}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_delete_manual_income(self, client, db, admin_headers):
        created = client.post(
            "/incomes", json={"date": "2025-03-10", "name": "Tip", "amount": 5}, headers=admin_headers
        ).json()

        response = client.delete(f"/incomes/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert db.query(Income).count() == 0

    def test_record_income_cannot_be_deleted_directly(self, client, db, create_record, employee_headers, admin_headers):
        record = create_record()
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee_headers)
        income = db.query(Income).filter(Income.record_id == record["id"]).one()

        response = client.delete(f"/incomes/{income.id}", headers=admin_headers)

        assert response.status_code == 400
        assert db.query(Income).count() == 1

    def test_employee_cannot_manage_ledger(self, client, employee_headers):
        response = client.get("/incomes", params={"date": "2025-03-10"}, headers=employee_headers)

        assert response.status_code == 403


class TestExpenses:
    def test_create_list_delete(self, client, admin_headers):
        created = client.post(
            "/expenses", json={"date": "2025-03-10", "name": "Gloves", "amount": 40}, headers=admin_headers
        )
        assert created.status_code == 200

        listed = client.get("/expenses", params={"date": "2025-03-10"}, headers=admin_headers).json()
        assert [e["name"] for e in listed] == ["Gloves"]

        assert client.delete(f"/expenses/{created.json()['id']}", headers=admin_headers).status_code == 200
        assert client.delete(f"/expenses/{created.json()['id']}", headers=admin_headers).status_code == 404


class TestEarnings:
    def test_daily_totals_for_month(self, client, admin_headers, employee_headers):
        for day, amount in [("2025-03-01", 100), ("2025-03-01", 50), ("2025-03-31", 10), ("2025-04-01", 99)]:
            client.post("/incomes", json={"date": day, "name": "Cash", "amount": amount}, headers=admin_headers)

        response = client.get("/earnings/2025-03", headers=employee_headers)

        assert response.status_code == 200
        assert response.json() == {"2025-03-01": 150, "2025-03-31": 10}
