"""Shared FastAPI dependencies."""
from __future__ import annotations

from pathlib import Path
from urllib.parse import urlencode

from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.core.formatting import (
    format_currency,
    format_display_date,
    format_display_datetime,
    format_percent,
)
from app.core.sales_status import classify_status, status_label

TEMPLATES_PATH = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_PATH))

templates.env.filters["money"] = format_currency
templates.env.filters["percent"] = format_percent
templates.env.filters["display_date"] = format_display_date
templates.env.filters["display_datetime"] = format_display_datetime
templates.env.filters["status_label"] = status_label
templates.env.filters["status_class"] = classify_status


def validation_message(exc: ValidationError) -> str:
    """Collapse a pydantic error into one line fit for a flash message."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "__root__")
        message = error.get("msg", "Invalid value")
        message = message.removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def redirect_with(url: str, **params: str | int | None) -> RedirectResponse:
    filtered = {key: value for key, value in params.items() if value not in (None, "")}
    if filtered:
        url = f"{url}?{urlencode(filtered)}"
    return RedirectResponse(url=url, status_code=303)
