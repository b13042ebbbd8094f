"""Fuel economy and calendar helpers shared by accessors and the dashboard."""
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta


def calculate_mileage(
    current_odometer: int,
    previous_odometer: Optional[int],
    quantity: float,
) -> Optional[float]:
    """Distance per unit of fuel since the previous fill-up.

    Returns None when there is no previous reading, when the distance is not
    positive, or when the quantity cannot be divided by.
    """
    if previous_odometer is None or not quantity or quantity <= 0:
        return None

    distance = current_odometer - previous_odometer
    if distance <= 0:
        return None

    return round(distance / quantity, 2)


def average(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the non-null values, None when there are none"""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 2)


def month_start(day: date) -> date:
    return day.replace(day=1)


def months_ago(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the month's length."""
    return day - relativedelta(months=months)
