"""Tests for report assembly and CSV/PDF export."""

import pytest

from bookkeeper.domain.reports import router as reports_router

MARCH = {"start": "2025-03-01", "end": "2025-03-31"}


@pytest.fixture
def busy_month(client, create_record, admin_headers, employee_headers, employee2_headers):
    """One shared done record, one pending record and one expense in March."""
    done = create_record(patientCount=4)
    client.post(f"/records/{done['id']}/complete", json={"patientCount": 3}, headers=employee_headers)
    client.post(f"/records/{done['id']}/complete", json={"patientCount": 1}, headers=employee2_headers)
    create_record(date="2025-03-12", patientCount=2)
    client.post("/expenses", json={"date": "2025-03-05", "name": "Gloves", "amount": 60}, headers=admin_headers)
    return done


class TestReportData:
    def test_report_shape(self, client, busy_month, admin_headers):
        response = client.get("/reports/data", params=MARCH, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == {"start": "2025-03-01", "end": "2025-03-31", "type": "month"}
        assert len(data["records"]) == 2
        assert data["analytics"] == {"totalIncome": 400, "totalExpense": 60, "result": 340, "uniqueClients": 1}
        assert data["dailyIncome"]["2025-03-10"]["total"] == 400
        assert data["dailyExpense"]["2025-03-05"]["total"] == 60

    def test_client_and_service_stats_use_record_capacity(self, client, busy_month, admin_headers):
        data = client.get("/reports/data", params=MARCH, headers=admin_headers).json()

        assert data["clientStats"] == [
            {"clientId": busy_month["clientId"], "name": "Paula Patient", "phone": "+15550100",
             "total": 400, "count": 1, "patientCount": 4}
        ]
        assert data["serviceStats"][0]["total"] == 400
        assert data["serviceStats"][0]["count"] == 1

    def test_employee_stats_use_completion_counts(self, client, busy_month, admin_headers):
        data = client.get("/reports/data", params=MARCH, headers=admin_headers).json()

        totals = {e["name"]: e["total"] for e in data["employeeStats"]}
        assert totals == {"Nina Nurse": 300, "Oleg Orderly": 100}
        assert [e["name"] for e in data["employeeStats"]] == ["Nina Nurse", "Oleg Orderly"]
        assert len(data["completionDetails"]) == 2

    def test_period_type(self, client, admin_headers, db):
        response = client.get("/reports/data", params={**MARCH, "period": "year"}, headers=admin_headers)

        assert response.json()["period"]["type"] == "year"

    def test_unknown_period_rejected(self, client, admin_headers, db):
        response = client.get("/reports/data", params={**MARCH, "period": "week"}, headers=admin_headers)

        assert response.status_code == 400

    def test_reversed_range_rejected(self, client, admin_headers, db):
        response = client.get(
            "/reports/data", params={"start": "2025-03-31", "end": "2025-03-01"}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_manager_forbidden(self, client, manager_headers, db):
        assert client.get("/reports/data", params=MARCH, headers=manager_headers).status_code == 403


class TestExports:
    def test_csv_export(self, client, busy_month, admin_headers):
        response = client.get("/reports/csv", params=MARCH, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="report_2025-03-01_2025-03-31.csv"' in response.headers["content-disposition"]
        text = response.content.decode("utf-8-sig")
        assert "Total income,400" in text
        assert "Gloves" in text
        assert "Nina Nurse" in text

    def test_pdf_export(self, client, busy_month, admin_headers):
        response = client.get("/reports/pdf", params=MARCH, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_pdf_export_empty_period(self, client, admin_headers, db):
        response = client.get("/reports/pdf", params=MARCH, headers=admin_headers)

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_bad_range_is_client_error(self, client, admin_headers, db):
        response = client.get("/reports/csv", params={"start": "2025-03-01"}, headers=admin_headers)

        assert response.status_code == 400

    def test_export_parses_range_once(self, client, admin_headers, db, monkeypatch):
        from bookkeeper.domain.analytics import service as analytics_service
        from bookkeeper.domain.reports import service as reports_service

        calls = []
        parse = reports_service.parse_date_range

        def counting_parse(*args, **kwargs):
            calls.append(args)
            return parse(*args, **kwargs)

        monkeypatch.setattr(reports_service, "parse_date_range", counting_parse)
        monkeypatch.setattr(analytics_service, "parse_date_range", counting_parse)

        response = client.get("/reports/csv", params=MARCH, headers=admin_headers)

        assert response.status_code == 200
        assert len(calls) == 1

    def test_render_failure_returns_500(self, client, admin_headers, db, monkeypatch):
        def broken_renderer(data):
            raise RuntimeError("renderer exploded")

        csv_format = reports_router.EXPORT_FORMATS["csv"]
        monkeypatch.setitem(reports_router.EXPORT_FORMATS, "csv", (broken_renderer, *csv_format[1:]))

        response = client.get("/reports/csv", params=MARCH, headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate CSV report"}
