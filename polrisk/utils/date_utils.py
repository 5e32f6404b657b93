"""Date and rounding utilities"""

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP


def archive_date_for(today: date, archive_day: int = 20) -> date:
    """Archive date for the month containing today (pinned to archive_day)"""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=min(archive_day, last_day))


def period_label(day: date) -> str:
    """Display label for an assessment period, e.g. 'January 2026'"""
    return f"{calendar.month_name[day.month]} {day.year}"


def round_half_up(value: float, places: int) -> float:
    """Round with ties away from zero (round() uses banker's rounding)"""
    quantum = Decimal(1).scaleb(-places)
    # + 0.0 folds -0.0 into 0.0
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)) + 0.0
