from datetime import date
from decimal import Decimal

from sqlalchemy import Date, func


def as_dict(row) -> dict:
    # Postgres hands back Decimal for SUM/AVG/DATE_PART; the API speaks floats
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in row._mapping.items()}


def num(value) -> float:
    return float(value) if value is not None else 0.0


def day_of(column):
    """Calendar day of a timestamp column, typed so date binds compare cleanly."""
    return func.date(column, type_=Date)


def require_range(start: date | None, end: date | None) -> tuple[date, date]:
    if start is None or end is None:
        raise ValueError("date range queries need both start and end")
    return start, end
