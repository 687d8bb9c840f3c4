# harvest/utils/dates.py
import calendar
from datetime import datetime


def add_months(dt: datetime, months: int) -> datetime:
    """Same day `months` later, clamped to the last day of a shorter month."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)
