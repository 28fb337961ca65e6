"""Commission reports built from the affiliate directory and the sales ledger.

The two tables are read independently and in full (no join, no pagination);
the pure aggregation in :mod:`app.core.commission` only runs once both reads
have succeeded, so a failed read never yields a partial report.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import crud
from app.core.commission import (
    ZERO,
    AffiliateRecord,
    AffiliateSummary,
    GlobalSummary,
    SaleRecord,
    StatusBreakdown,
    resolve_affiliate,
    resolve_commission,
    status_breakdown,
    summarize,
    to_decimal,
)
from app.models import Affiliate, Customer, Sale

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportUnavailable(RuntimeError):
    """Raised when one of the source collections could not be read."""


@dataclass
class CommissionReport:
    summaries: List[AffiliateSummary]
    totals: GlobalSummary
    statuses: StatusBreakdown


@dataclass
class HistoryEntry:
    sale: Sale
    record: SaleRecord
    affiliate: Optional[AffiliateRecord]
    commission: Decimal


@dataclass
class CustomerHistory:
    customer: Customer
    entries: List[HistoryEntry] = field(default_factory=list)

    @property
    def total_spent(self) -> Decimal:
        return sum((entry.record.amount for entry in self.entries), ZERO)

    @property
    def total_commission(self) -> Decimal:
        return sum((entry.commission for entry in self.entries), ZERO)


def affiliate_to_record(affiliate: Affiliate) -> AffiliateRecord:
    return AffiliateRecord(
        id=affiliate.id,
        contact_handle=affiliate.whatsapp or "",
        commission_rate=to_decimal(affiliate.commission_percent, "commission_percent", affiliate.id),
    )


def sale_to_record(sale: Sale) -> SaleRecord:
    return SaleRecord(
        id=sale.id,
        amount=to_decimal(sale.total_amount, "total_amount", sale.id),
        affiliate_ref=sale.affiliate_id or None,
        status=sale.status or "",
    )


def read_source(db: Session, what: str, reader: Callable[[Session], T]) -> T:
    """Run one read for a report, turning database errors into ReportUnavailable."""
    try:
        return reader(db)
    except SQLAlchemyError as exc:
        logger.error("Failed to read %s: %s", what, exc)
        raise ReportUnavailable(what) from exc


def load_affiliate_records(db: Session) -> List[AffiliateRecord]:
    rows = read_source(db, "affiliates", crud.all_affiliates)
    return [affiliate_to_record(row) for row in rows]


def load_sale_records(db: Session) -> List[SaleRecord]:
    rows = read_source(db, "sales", crud.all_sales)
    return [sale_to_record(row) for row in rows]


def build_commission_report(db: Session) -> CommissionReport:
    affiliates = load_affiliate_records(db)
    sales = load_sale_records(db)
    summaries, totals = summarize(affiliates, sales)
    return CommissionReport(summaries=summaries, totals=totals, statuses=status_breakdown(sales))


def build_customer_history(db: Session, customer: Customer) -> CustomerHistory:
    """Sales of one customer, newest first, each with its own commission."""

    affiliates = load_affiliate_records(db)
    sales = read_source(db, "sales", lambda session: crud.list_sales_for_customer(session, customer.id))

    history = CustomerHistory(customer=customer)
    for sale in sales:
        record = sale_to_record(sale)
        history.entries.append(
            HistoryEntry(
                sale=sale,
                record=record,
                affiliate=resolve_affiliate(record, affiliates),
                commission=resolve_commission(record, affiliates),
            )
        )
    return history
