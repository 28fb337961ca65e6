"""Display classification for the free-text sale status column.

Sales arrive with numeric codes ("1", "0", "-1") from the checkout and with
words ("pago", "pendente", ...) when typed in by hand.
"""
from __future__ import annotations

STATUS_LABELS = {
    "1": "Pago",
    "0": "Pendente",
    "-1": "Cancelado",
}

STATUS_CHOICES = tuple(STATUS_LABELS.items())


def classify_status(value: str | None) -> str:
    """Return ``paid``, ``pending``, ``cancelled`` or ``other``."""
    normalized = (value or "").strip().lower()
    if "pago" in normalized or normalized in {"1", "aprovado"}:
        return "paid"
    if "pendente" in normalized or normalized == "0":
        return "pending"
    if "cancelado" in normalized or normalized == "-1":
        return "cancelled"
    return "other"


def status_label(value: str | None) -> str:
    if value is None:
        return ""
    return STATUS_LABELS.get(value.strip(), value)


__all__ = ["STATUS_CHOICES", "STATUS_LABELS", "classify_status", "status_label"]
