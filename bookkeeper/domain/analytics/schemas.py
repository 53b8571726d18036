"""Analytics response schemas"""

from pydantic import BaseModel


class EmployeeStat(BaseModel):
    id: int
    fullName: str
    completedServices: int
    revenue: int


class MonthlyAnalyticsResponse(BaseModel):
    totalIncome: int
    totalExpense: int
    result: int
    uniqueClients: int
    incomePercent: int
    employeeStats: list[EmployeeStat]
