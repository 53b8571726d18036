"""Analytics service - aggregates over inclusive date ranges"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...config import MAX_REPORT_RANGE_DAYS
from ...models import RECORD_STATUS_DONE, User
from ...shared.errors import NotFoundError
from ...shared.validators import parse_date_range, parse_optional_date
from ..ledger.repository import LedgerRepository
from ..ledger.service import expense_to_dict, income_to_dict
from ..records.repository import RecordRepository
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)


def percent(part: int, total: int) -> int:
    """Whole percentage of part in total, rounded half up; 0 when total is 0"""
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)


class AnalyticsService:
    """
    Income, expense, client and employee statistics.

    All amounts are integers. Revenue is attributed once per record at
    price × record patient count, even when several employees completed parts
    of it; de-duplication state lives only for the duration of one call.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = AnalyticsRepository()
        self.ledger_repo = LedgerRepository()
        self.record_repo = RecordRepository()

    def _range(self, start: Optional[str], end: Optional[str]):
        return parse_date_range(start, end, MAX_REPORT_RANGE_DAYS)

    def monthly_analytics(self, start: Optional[str], end: Optional[str]) -> dict:
        return self.monthly_between(*self._range(start, end))

    def monthly_between(self, start_date: date, end_date: date) -> dict:
        """Monthly analytics over an already validated range"""
        total_income = self.repo.sum_incomes(self.db, start_date, end_date)
        total_expense = self.repo.sum_expenses(self.db, start_date, end_date)

        done_records = self.record_repo.get_records_in_range(self.db, start_date, end_date, RECORD_STATUS_DONE)
        unique_clients = {r.client_id for r in done_records if r.client_id is not None}

        counted_records = set()
        employees: dict[int, dict] = {}
        for completion in self.repo.get_completions_in_range(self.db, start_date, end_date):
            record = completion.record
            stats = employees.setdefault(
                completion.employee_id,
                {
                    "id": completion.employee_id,
                    "fullName": completion.employee.full_name,
                    "completedServices": 0,
                    "revenue": 0,
                },
            )
            stats["completedServices"] += 1

            # The first completing employee carries the record's revenue
            if record.id not in counted_records:
                counted_records.add(record.id)
                stats["revenue"] += record.service.price * record.patient_count

        return {
            "totalIncome": total_income,
            "totalExpense": total_expense,
            "result": total_income - total_expense,
            "uniqueClients": len(unique_clients),
            "incomePercent": percent(total_income, total_income + total_expense),
            "employeeStats": list(employees.values()),
        }

    def detailed_income(self, start: Optional[str], end: Optional[str]) -> dict:
        return self.income_between(*self._range(start, end))

    def income_between(self, start_date: date, end_date: date) -> dict:
        incomes = self.ledger_repo.get_incomes(self.db, start_date, end_date)
        names = self.ledger_repo.get_completing_employee_names(
            self.db, [i.record_id for i in incomes if i.record_id is not None]
        )

        by_date: dict[str, list[dict]] = {}
        by_service: dict[str, int] = {}
        record_ids = set()
        client_ids = set()
        for income in incomes:
            service_name = None
            if income.record is not None:
                record_ids.add(income.record_id)
                if income.record.client_id is not None:
                    client_ids.add(income.record.client_id)
                service_name = income.record.service.name

            entry = income_to_dict(income, names.get(income.record_id))
            entry["serviceName"] = service_name
            by_date.setdefault(entry["date"], []).append(entry)

            key = service_name or income.name
            by_service[key] = by_service.get(key, 0) + income.amount

        return {
            "byDate": by_date,
            "byService": by_service,
            "totalIncome": sum(i.amount for i in incomes),
            "recordCount": len(record_ids),
            "clientCount": len(client_ids),
        }

    def detailed_expense(self, start: Optional[str], end: Optional[str]) -> dict:
        return self.expense_between(*self._range(start, end))

    def expense_between(self, start_date: date, end_date: date) -> dict:
        expenses = self.ledger_repo.get_expenses(self.db, start_date, end_date)

        by_date: dict[str, list[dict]] = {}
        by_category: dict[str, int] = {}
        for expense in expenses:
            entry = expense_to_dict(expense)
            by_date.setdefault(entry["date"], []).append(entry)
            by_category[expense.name] = by_category.get(expense.name, 0) + expense.amount

        return {
            "byDate": by_date,
            "byCategory": by_category,
            "totalExpense": sum(e.amount for e in expenses),
        }

    def detailed_clients(self, start: Optional[str], end: Optional[str]) -> dict:
        """Spending per client over done records, biggest spenders first"""
        start_date, end_date = self._range(start, end)
        done_records = self.record_repo.get_records_in_range(self.db, start_date, end_date, RECORD_STATUS_DONE)

        clients: dict[int, dict] = {}
        for record in done_records:
            if record.client is None:
                continue
            stats = clients.setdefault(
                record.client_id,
                {
                    "client": {
                        "id": record.client.id,
                        "fullName": record.client.full_name,
                        "phone": record.client.phone,
                    },
                    "totalSpent": 0,
                    "servicesCount": 0,
                },
            )
            stats["totalSpent"] += record.service.price * record.patient_count
            stats["servicesCount"] += 1

        client_stats = sorted(clients.values(), key=lambda c: c["totalSpent"], reverse=True)
        return {
            "clientStats": client_stats,
            "totalFromClients": sum(c["totalSpent"] for c in client_stats),
            "uniqueClients": len(client_stats),
        }

    def employee_daily_analytics(
        self,
        employee_id: int,
        start: Optional[str] = None,
        end: Optional[str] = None,
        service_id: Optional[int] = None,
    ) -> dict:
        """
        Day-by-day workload of one employee, newest day first.

        Uses each completion's own patient count (the work the employee did),
        not the record's capacity.
        """
        employee = self.db.get(User, employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        completions = self.record_repo.get_employee_completion_rows(
            self.db,
            employee_id,
            parse_optional_date(start, "startDate"),
            parse_optional_date(end, "endDate"),
            service_id,
        )

        days: dict[str, dict] = {}
        total_clients = 0
        for completion in completions:
            record = completion.record
            day = days.setdefault(
                record.date.isoformat(),
                {
                    "date": record.date.isoformat(),
                    "clientsServed": 0,
                    "completedServices": 0,
                    "serviceDetails": [],
                },
            )
            day["clientsServed"] += completion.patient_count
            day["completedServices"] += 1
            day["serviceDetails"].append(
                {
                    "serviceName": record.service.name,
                    "patientCount": completion.patient_count,
                    "time": record.time,
                }
            )
            total_clients += completion.patient_count

        return {
            "employee": {"id": employee.id, "fullName": employee.full_name},
            "dailyStats": sorted(days.values(), key=lambda d: d["date"], reverse=True),
            "totalClientsServed": total_clients,
            "totalServices": len(completions),
        }
