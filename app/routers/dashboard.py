"""Dashboard routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.commission import build_commission_report, read_source
from app.database import get_session
from app.dependencies import templates
from app.models import Customer
from app.routers.auth import get_current_user

router = APIRouter(tags=["Dashboard"])


def dashboard_summary(db: Session) -> dict[str, object]:
    """Headline numbers; revenue covers every sale, attributed or not."""
    report = build_commission_report(db)
    totals = report.totals
    return {
        "affiliate_count": totals.affiliate_count,
        "customer_count": read_source(db, "customers", lambda session: crud.count_rows(session, Customer)),
        "sale_count": totals.sale_count,
        "revenue": totals.all_sales_gross,
        "attributed_revenue": totals.total_gross,
        "total_commission": totals.total_commission,
        "statuses": report.statuses,
    }


@router.get("/dashboard")
def dashboard(request: Request, db: Session = Depends(get_session), user: User = Depends(get_current_user)):
    summary = dashboard_summary(db)
    return templates.TemplateResponse(request, "dashboard/index.html", {"user": user, "summary": summary})


@router.get("/dashboard/data")
def dashboard_data(db: Session = Depends(get_session), user: User = Depends(get_current_user)):
    _ = user
    summary = dashboard_summary(db)
    return JSONResponse(
        {
            "affiliate_count": summary["affiliate_count"],
            "customer_count": summary["customer_count"],
            "sale_count": summary["sale_count"],
            "revenue": str(summary["revenue"]),
            "attributed_revenue": str(summary["attributed_revenue"]),
            "total_commission": str(summary["total_commission"]),
        }
    )
