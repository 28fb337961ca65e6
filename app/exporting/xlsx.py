from __future__ import annotations

from io import BytesIO
from typing import Iterable

import pandas as pd
from sqlalchemy.orm import Session

from app import crud
from app.commission import build_commission_report, read_source
from app.core.commission import AffiliateSummary
from app.core.sales_status import status_label
from app.models import Affiliate, Sale

SUMMARY_COLUMNS = [
    "affiliate_id",
    "whatsapp",
    "commission_percent",
    "sale_count",
    "gross_amount",
    "commission_amount",
]


def _summary_df(summaries: Iterable[AffiliateSummary]) -> pd.DataFrame:
    rows = []
    for item in summaries:
        rows.append(
            {
                "affiliate_id": item.affiliate_id,
                "whatsapp": item.contact_handle,
                "commission_percent": float(item.commission_rate),
                "sale_count": item.sale_count,
                "gross_amount": float(item.gross_amount),
                "commission_amount": float(item.commission_amount),
            }
        )
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _affiliates_df(affiliates: Iterable[Affiliate]) -> pd.DataFrame:
    rows = []
    for item in affiliates:
        rows.append(
            {
                "affiliate_id": item.id,
                "customer_id": item.customer_id,
                "whatsapp": item.whatsapp,
                "link": item.link,
                "commission_percent": float(item.commission_percent)
                if item.commission_percent is not None
                else None,
                "created_at": item.created_at,
            }
        )
    return pd.DataFrame(rows)


def _sales_df(sales: Iterable[Sale]) -> pd.DataFrame:
    rows = []
    for item in sales:
        rows.append(
            {
                "sale_id": item.id,
                "code": item.code,
                "product_name": item.product_name,
                "total_amount": float(item.total_amount) if item.total_amount is not None else None,
                "status": item.status,
                "status_label": status_label(item.status),
                "customer_id": item.customer_id,
                "customer_name": item.customer_name,
                "payment_method": item.payment_method,
                "affiliate_id": item.affiliate_id,
                "date_created": item.date_created,
            }
        )
    return pd.DataFrame(rows)


def export_commission_workbook(db: Session) -> bytes:
    """Return an XLSX workbook (bytes) with the commission report and its sources."""

    report = build_commission_report(db)
    affiliates = read_source(db, "affiliates", crud.all_affiliates)
    sales = read_source(db, "sales", crud.all_sales)
    totals = report.totals
    df_totals = pd.DataFrame(
        [
            {"metric": "affiliate_count", "value": totals.affiliate_count},
            {"metric": "sale_count", "value": totals.sale_count},
            {"metric": "total_gross", "value": float(totals.total_gross)},
            {"metric": "all_sales_gross", "value": float(totals.all_sales_gross)},
            {"metric": "unattributed_gross", "value": float(totals.unattributed_gross)},
            {"metric": "total_commission", "value": float(totals.total_commission)},
        ]
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        _summary_df(report.summaries).to_excel(writer, sheet_name="Comissoes", index=False)
        df_totals.to_excel(writer, sheet_name="Totais", index=False)
        _affiliates_df(affiliates).to_excel(writer, sheet_name="Afiliados", index=False)
        _sales_df(sales).to_excel(writer, sheet_name="Vendas", index=False)

    buffer.seek(0)
    return buffer.getvalue()
