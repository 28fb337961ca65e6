"""Affiliate commission report routes."""
from __future__ import annotations

import csv
from datetime import datetime
from io import StringIO

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from sqlalchemy.orm import Session

from app.auth import User
from app.commission import CommissionReport, build_commission_report
from app.core.formatting import format_amount, format_percent
from app.database import get_session
from app.dependencies import templates
from app.exporting import export_commission_workbook
from app.routers.auth import get_admin_user, get_current_user

router = APIRouter(prefix="/commissions", tags=["Commissions"])


def serialize_report(report: CommissionReport) -> dict[str, object]:
    totals = report.totals
    statuses = report.statuses
    return {
        "affiliates": [
            {
                "affiliate_id": item.affiliate_id,
                "contact_handle": item.contact_handle,
                "commission_rate": str(item.commission_rate),
                "sale_count": item.sale_count,
                "gross_amount": str(item.gross_amount),
                "commission_amount": str(item.commission_amount),
            }
            for item in report.summaries
        ],
        "totals": {
            "total_gross": str(totals.total_gross),
            "total_commission": str(totals.total_commission),
            "affiliate_count": totals.affiliate_count,
            "all_sales_gross": str(totals.all_sales_gross),
            "unattributed_gross": str(totals.unattributed_gross),
            "sale_count": totals.sale_count,
        },
        "statuses": {
            "paid": {"amount": str(statuses.paid), "count": statuses.paid_count},
            "pending": {"amount": str(statuses.pending), "count": statuses.pending_count},
            "cancelled": {"amount": str(statuses.cancelled), "count": statuses.cancelled_count},
            "other": {"amount": str(statuses.other), "count": statuses.other_count},
        },
    }


@router.get("")
def commissions_page(
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    report = build_commission_report(db)
    return templates.TemplateResponse(request, "commissions/index.html", {"user": user, "report": report})


@router.get("/data")
def commissions_data(
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),  # noqa: ARG001 - ensure auth
):
    report = build_commission_report(db)
    payload = serialize_report(report)
    payload["generated_at"] = datetime.now().isoformat(timespec="seconds")
    return JSONResponse(payload)


@router.get("/export")
def export_commissions_csv(
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> StreamingResponse:
    report = build_commission_report(db)

    buffer = StringIO()
    writer = csv.writer(buffer, delimiter=";")
    writer.writerow(["WhatsApp", "Comissão (%)", "Qtd. Vendas", "Valor Vendido", "Total Comissão"])
    for item in report.summaries:
        writer.writerow(
            [
                item.contact_handle,
                format_percent(item.commission_rate),
                item.sale_count,
                format_amount(item.gross_amount),
                format_amount(item.commission_amount),
            ]
        )
    writer.writerow(
        [
            "TOTAL",
            "",
            sum(item.sale_count for item in report.summaries),
            format_amount(report.totals.total_gross),
            format_amount(report.totals.total_commission),
        ]
    )

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    csv_bytes = buffer.getvalue().encode("utf-8-sig")
    response = StreamingResponse(iter([csv_bytes]), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename=comissoes_{timestamp}.csv"
    return response


@router.get("/export-xlsx")
def export_commissions_xlsx(
    db: Session = Depends(get_session),
    user: User = Depends(get_admin_user),  # noqa: ARG001 - admin only
) -> Response:
    content = export_commission_workbook(db)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Response(
        content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=comissoes_{timestamp}.xlsx"},
    )
