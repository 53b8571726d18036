"""Report data assembler - one structure feeding every export format"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...config import MAX_REPORT_RANGE_DAYS
from ...models import RECORD_STATUS_DONE
from ...shared.errors import ValidationError
from ...shared.validators import parse_date_range
from ..analytics.service import AnalyticsService
from ..records.repository import RecordRepository
from ..records.router import to_record_response

logger = logging.getLogger(__name__)

REPORT_PERIODS = ("day", "month", "year")
UNKNOWN_LABEL = "Unknown"


class ReportService:
    """
    Collects records, ledger entries and statistics for a date range.

    Client and service statistics use done records at price × record patient
    count. Employee statistics use each completion's own patient count, so
    they describe workload rather than billed revenue.
    """

    def __init__(self, db: Session):
        self.db = db
        self.analytics = AnalyticsService(db)
        self.record_repo = RecordRepository()

    def validate_params(
        self, start: Optional[str], end: Optional[str], period: Optional[str]
    ) -> tuple[date, date, str]:
        """Parse the range and period once; the result feeds build_report"""
        start_date, end_date = parse_date_range(start, end, MAX_REPORT_RANGE_DAYS)
        period = period or "month"
        if period not in REPORT_PERIODS:
            raise ValidationError(f"Invalid period: expected one of {', '.join(REPORT_PERIODS)}")
        return start_date, end_date, period

    def assemble_report(self, start: Optional[str], end: Optional[str], period: Optional[str] = None) -> dict:
        return self.build_report(*self.validate_params(start, end, period))

    def build_report(self, start_date: date, end_date: date, period: str) -> dict:
        start, end = start_date.isoformat(), end_date.isoformat()

        monthly = self.analytics.monthly_between(start_date, end_date)
        income_data = self.analytics.income_between(start_date, end_date)
        expense_data = self.analytics.expense_between(start_date, end_date)
        records = self.record_repo.get_records_in_range(self.db, start_date, end_date)

        incomes, daily_income = _flatten_by_date(income_data["byDate"])
        expenses, daily_expense = _flatten_by_date(expense_data["byDate"])

        clients: dict[int, dict] = {}
        services: dict[int, dict] = {}
        employees: dict[int, dict] = {}
        completion_details = []

        for record in records:
            if record.status != RECORD_STATUS_DONE:
                continue

            price = record.service.price
            record_total = price * record.patient_count

            if record.client is not None:
                client = clients.setdefault(
                    record.client_id,
                    {
                        "clientId": record.client_id,
                        "name": record.client.full_name,
                        "phone": record.client.phone or "",
                        "total": 0,
                        "count": 0,
                        "patientCount": 0,
                    },
                )
                client["total"] += record_total
                client["count"] += 1
                client["patientCount"] += record.patient_count

            service = services.setdefault(
                record.service_id,
                {
                    "serviceId": record.service_id,
                    "name": record.service.name,
                    "total": 0,
                    "count": 0,
                    "patientCount": 0,
                },
            )
            service["total"] += record_total
            service["count"] += 1
            service["patientCount"] += record.patient_count

            for completion in record.completions:
                employee_name = completion.employee.full_name if completion.employee else UNKNOWN_LABEL
                completion_total = price * completion.patient_count

                completion_details.append(
                    {
                        "employeeId": completion.employee_id,
                        "employeeName": employee_name,
                        "patientCount": completion.patient_count,
                        "serviceName": record.service.name,
                        "servicePrice": price,
                        "recordDate": record.date.isoformat(),
                        "recordTime": record.time,
                    }
                )

                employee = employees.setdefault(
                    completion.employee_id,
                    {
                        "employeeId": completion.employee_id,
                        "name": employee_name,
                        "total": 0,
                        "patientCount": 0,
                        "services": {},
                    },
                )
                employee["total"] += completion_total
                employee["patientCount"] += completion.patient_count
                per_service = employee["services"].setdefault(record.service.name, {"total": 0, "patientCount": 0})
                per_service["total"] += completion_total
                per_service["patientCount"] += completion.patient_count

        logger.info(
            f"📊 Assembled report {start}..{end} ({period}): {len(records)} records, "
            f"{len(incomes)} incomes, {len(expenses)} expenses"
        )

        return {
            "records": [to_record_response(r).model_dump(mode="json") for r in records],
            "incomes": incomes,
            "expenses": expenses,
            "analytics": {
                "totalIncome": monthly["totalIncome"],
                "totalExpense": monthly["totalExpense"],
                "result": monthly["result"],
                "uniqueClients": monthly["uniqueClients"],
            },
            "period": {"start": start, "end": end, "type": period},
            "dailyIncome": daily_income,
            "dailyExpense": daily_expense,
            "clientStats": _by_total(clients),
            "serviceStats": _by_total(services),
            "employeeStats": _by_total(employees),
            "completionDetails": completion_details,
        }


def _flatten_by_date(by_date: dict[str, list[dict]]) -> tuple[list[dict], dict[str, dict]]:
    items = []
    daily = {}
    for day, entries in by_date.items():
        daily[day] = {"total": sum(e["amount"] for e in entries), "items": entries}
        items.extend(entries)
    return items, daily


def _by_total(stats: dict[int, dict]) -> list[dict]:
    return sorted(stats.values(), key=lambda s: s["total"], reverse=True)
