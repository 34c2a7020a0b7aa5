from datetime import date
from typing import Literal, Optional

import pandas as pd
from fastapi import Query
from fastapi.responses import Response

from app.errors import ValidationError

OutputFormat = Literal["json", "csv"]


def date_range(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
) -> tuple[date, date]:
    if start_date is None or end_date is None:
        raise ValidationError("Start date and end date are required")
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return start_date, end_date


def optional_date_range(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
) -> tuple[Optional[date], Optional[date]]:
    return start_date, end_date


def respond(rows: list[dict], fmt: OutputFormat = "json"):
    """JSON array by default; ``format=csv`` returns the same rows as a CSV table."""
    if fmt == "csv":
        return Response(content=pd.DataFrame(rows).to_csv(index=False), media_type="text/csv")
    return rows
