"""Commission aggregation over affiliates and sales.

Everything here is pure: the functions take already-loaded records, never
touch the database and never mutate their inputs. Loading and converting rows
into records lives in :mod:`app.commission`.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from app.core.sales_status import classify_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

Reference = Union[str, int]


@dataclass(frozen=True)
class AffiliateRecord:
    """Affiliate identity and its commission rate (a percentage, 0-100)."""

    id: str
    contact_handle: str
    commission_rate: Decimal


@dataclass(frozen=True)
class SaleRecord:
    """A sale as seen by the aggregator.

    ``affiliate_ref`` is ``None`` for direct sales. It may also point at an
    affiliate that no longer exists; such sales earn no commission.
    """

    id: Reference
    amount: Decimal
    affiliate_ref: Optional[str] = None
    status: str = ""


@dataclass(frozen=True)
class AffiliateSummary:
    affiliate_id: str
    contact_handle: str
    commission_rate: Decimal
    sale_count: int
    gross_amount: Decimal
    commission_amount: Decimal


@dataclass(frozen=True)
class GlobalSummary:
    """Totals across every affiliate.

    ``total_gross`` only covers attributed sales (sum of the per-affiliate
    gross amounts). ``all_sales_gross`` covers every sale, including direct
    sales and sales pointing at unknown affiliates.
    """

    total_gross: Decimal
    total_commission: Decimal
    affiliate_count: int
    all_sales_gross: Decimal = ZERO
    sale_count: int = 0

    @property
    def unattributed_gross(self) -> Decimal:
        return self.all_sales_gross - self.total_gross


@dataclass(frozen=True)
class StatusBreakdown:
    paid: Decimal = ZERO
    pending: Decimal = ZERO
    cancelled: Decimal = ZERO
    other: Decimal = ZERO
    paid_count: int = 0
    pending_count: int = 0
    cancelled_count: int = 0
    other_count: int = 0


def to_decimal(value, field: str = "value", record_id: Optional[Reference] = None) -> Decimal:
    """Coerce a stored numeric value into a finite ``Decimal``.

    Missing, non-numeric, NaN and infinite values become zero and a warning is
    logged so bad rows can be tracked down.
    """

    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        decimal_value = value
    else:
        try:
            decimal_value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            logger.warning("Non-numeric %s %r on record %s; using 0", field, value, record_id)
            return ZERO
    if not decimal_value.is_finite():
        logger.warning("Non-finite %s %r on record %s; using 0", field, value, record_id)
        return ZERO
    return decimal_value


def commission_for(amount: Decimal, rate: Decimal) -> Decimal:
    """Commission owed on ``amount`` at ``rate`` percent, unrounded."""

    return amount * rate / HUNDRED


def index_sales_by_affiliate(sales: Iterable[SaleRecord]) -> Dict[str, List[SaleRecord]]:
    grouped: Dict[str, List[SaleRecord]] = defaultdict(list)
    for sale in sales:
        if sale.affiliate_ref is not None:
            grouped[sale.affiliate_ref].append(sale)
    return grouped


def summarize(
    affiliates: Sequence[AffiliateRecord],
    sales: Sequence[SaleRecord],
) -> Tuple[List[AffiliateSummary], GlobalSummary]:
    """Per-affiliate rollups (in input order) plus global totals.

    Sales are grouped by ``affiliate_ref`` once, so the cost is linear in the
    size of both collections. Status is never used to filter.
    """

    by_affiliate = index_sales_by_affiliate(sales)

    summaries: List[AffiliateSummary] = []
    for affiliate in affiliates:
        matched = by_affiliate.get(affiliate.id, [])
        gross = sum((sale.amount for sale in matched), ZERO)
        summaries.append(
            AffiliateSummary(
                affiliate_id=affiliate.id,
                contact_handle=affiliate.contact_handle,
                commission_rate=affiliate.commission_rate,
                sale_count=len(matched),
                gross_amount=gross,
                commission_amount=commission_for(gross, affiliate.commission_rate),
            )
        )

    totals = GlobalSummary(
        total_gross=sum((item.gross_amount for item in summaries), ZERO),
        total_commission=sum((item.commission_amount for item in summaries), ZERO),
        affiliate_count=len(affiliates),
        all_sales_gross=sum((sale.amount for sale in sales), ZERO),
        sale_count=len(sales),
    )
    return summaries, totals


def resolve_affiliate(
    sale: SaleRecord, affiliates: Iterable[AffiliateRecord]
) -> Optional[AffiliateRecord]:
    if sale.affiliate_ref is None:
        return None
    for affiliate in affiliates:
        if affiliate.id == sale.affiliate_ref:
            return affiliate
    return None


def resolve_commission(sale: SaleRecord, affiliates: Iterable[AffiliateRecord]) -> Decimal:
    """Commission earned by a single sale; zero for direct or orphaned sales."""

    affiliate = resolve_affiliate(sale, affiliates)
    if affiliate is None:
        return ZERO
    return commission_for(sale.amount, affiliate.commission_rate)


def status_breakdown(sales: Iterable[SaleRecord]) -> StatusBreakdown:
    amounts = {"paid": ZERO, "pending": ZERO, "cancelled": ZERO, "other": ZERO}
    counts = {"paid": 0, "pending": 0, "cancelled": 0, "other": 0}
    for sale in sales:
        bucket = classify_status(sale.status)
        amounts[bucket] += sale.amount
        counts[bucket] += 1
    return StatusBreakdown(
        paid=amounts["paid"],
        pending=amounts["pending"],
        cancelled=amounts["cancelled"],
        other=amounts["other"],
        paid_count=counts["paid"],
        pending_count=counts["pending"],
        cancelled_count=counts["cancelled"],
        other_count=counts["other"],
    )


__all__ = [
    "AffiliateRecord",
    "AffiliateSummary",
    "GlobalSummary",
    "SaleRecord",
    "StatusBreakdown",
    "commission_for",
    "index_sales_by_affiliate",
    "resolve_affiliate",
    "resolve_commission",
    "status_breakdown",
    "summarize",
    "to_decimal",
]
