"""
Spreadsheet export of assembled report data.
Sections are separated by a blank row so the file opens cleanly in Excel or LibreOffice.
"""

import csv
import logging
from io import StringIO

logger = logging.getLogger(__name__)


def generate_report_csv(data: dict) -> bytes:
    """Render report data as UTF-8 CSV (with BOM for spreadsheet apps)"""
    output = StringIO()
    writer = csv.writer(output)
    period = data["period"]
    analytics = data["analytics"]

    writer.writerow(["Report", f"{period['start']} - {period['end']}", period["type"]])
    writer.writerow([])

    writer.writerow(["Summary"])
    writer.writerow(["Total income", analytics["totalIncome"]])
    writer.writerow(["Total expense", analytics["totalExpense"]])
    writer.writerow(["Result", analytics["result"]])
    writer.writerow(["Unique clients", analytics["uniqueClients"]])
    writer.writerow(["Patients served", sum(s["patientCount"] for s in data["serviceStats"])])
    writer.writerow([])

    writer.writerow(["Incomes"])
    writer.writerow(["Date", "Time", "Name", "Service", "Employees", "Amount"])
    for income in data["incomes"]:
        writer.writerow(
            [
                income["date"],
                income.get("time") or "",
                income["name"],
                income.get("serviceName") or "",
                income.get("employeeName") or "",
                income["amount"],
            ]
        )
    writer.writerow([])

    writer.writerow(["Expenses"])
    writer.writerow(["Date", "Time", "Name", "Amount"])
    for expense in data["expenses"]:
        writer.writerow([expense["date"], expense.get("time") or "", expense["name"], expense["amount"]])
    writer.writerow([])

    writer.writerow(["Clients"])
    writer.writerow(["Client", "Phone", "Visits", "Patients", "Total"])
    for client in data["clientStats"]:
        writer.writerow([client["name"], client["phone"], client["count"], client["patientCount"], client["total"]])
    writer.writerow([])

    writer.writerow(["Services"])
    writer.writerow(["Service", "Records", "Patients", "Total"])
    for service in data["serviceStats"]:
        writer.writerow([service["name"], service["count"], service["patientCount"], service["total"]])
    writer.writerow([])

    writer.writerow(["Employees"])
    writer.writerow(["Employee", "Service", "Patients", "Total"])
    for employee in data["employeeStats"]:
        writer.writerow([employee["name"], "", employee["patientCount"], employee["total"]])
        for service_name, stats in employee["services"].items():
            writer.writerow(["", service_name, stats["patientCount"], stats["total"]])

    logger.info(f"✅ CSV report rendered for {period['start']}..{period['end']}")
    return output.getvalue().encode("utf-8-sig")
