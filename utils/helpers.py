from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import pandas as pd


def round_half_up(value, places: int = 0):
    """Round like the dashboard does: 62.5 -> 63, never banker's rounding."""
    exp = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def round_money(value) -> float:
    return round_half_up(value or 0, 2)


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def safe_str(value) -> Optional[str]:
    """Safely convert value to string, handling NaN and None"""
    if is_blank(value):
        return None
    return str(value).strip()


def safe_int(value) -> Optional[int]:
    if is_blank(value):
        return None
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return None


def safe_float(value) -> Optional[float]:
    if is_blank(value):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def parse_date(value) -> Optional[date]:
    """Parse date from various formats"""
    if is_blank(value):
        return None

    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_formats = [
        "%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d",
        "%d-%b-%Y", "%d %b %Y", "%Y-%m-%d %H:%M:%S"
    ]

    value_str = str(value).strip()
    for fmt in date_formats:
        try:
            return datetime.strptime(value_str, fmt).date()
        except ValueError:
            continue
    return None
