"""Routes for the sales ledger."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.core.sales_status import STATUS_CHOICES
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.routers.auth import get_current_user
from app.schemas import SaleCreate, SaleUpdate

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("/")
def list_sales(
    request: Request,
    page: int = 1,
    edit: int | None = None,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    result = crud.list_sales(db, page)
    editing = crud.get_sale(db, edit) if edit else None
    return templates.TemplateResponse(
        request,
        "sales/list.html",
        {
            "user": user,
            "page": result,
            "editing": editing,
            "status_choices": STATUS_CHOICES,
            "affiliates": crud.all_affiliates(db),
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


def _sale_fields(
    code: str,
    product_name: str,
    total_amount: str,
    status: str,
    customer_id: str,
    customer_name: str,
    payment_method: str,
    affiliate_id: str,
) -> dict[str, str]:
    return {
        "code": code,
        "product_name": product_name,
        "total_amount": total_amount or "0",
        "status": status,
        "customer_id": customer_id,
        "customer_name": customer_name,
        "payment_method": payment_method,
        "affiliate_id": affiliate_id,
    }


@router.post("/new")
def create_sale(
    code: str = Form(""),
    product_name: str = Form(""),
    total_amount: str = Form("0"),
    status: str = Form("1"),
    customer_id: str = Form(""),
    customer_name: str = Form(""),
    payment_method: str = Form(""),
    affiliate_id: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    try:
        payload = SaleCreate(
            **_sale_fields(
                code, product_name, total_amount, status, customer_id, customer_name, payment_method, affiliate_id
            )
        )
    except ValidationError as exc:
        return redirect_with("/sales/", error=validation_message(exc))
    crud.create_sale(db, payload)
    return redirect_with("/sales/", success="Venda salva com sucesso!")


@router.post("/{sale_id}/edit")
def update_sale(
    sale_id: int,
    code: str = Form(""),
    product_name: str = Form(""),
    total_amount: str = Form("0"),
    status: str = Form("1"),
    customer_id: str = Form(""),
    customer_name: str = Form(""),
    payment_method: str = Form(""),
    affiliate_id: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    sale = crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    try:
        payload = SaleUpdate(
            **_sale_fields(
                code, product_name, total_amount, status, customer_id, customer_name, payment_method, affiliate_id
            )
        )
    except ValidationError as exc:
        return redirect_with("/sales/", edit=sale_id, error=validation_message(exc))
    crud.update_sale(db, sale, payload)
    return redirect_with("/sales/", success="Venda salva com sucesso!")


@router.post("/{sale_id}/delete")
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    sale = crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    crud.delete_sale(db, sale)
    return redirect_with("/sales/", success="Venda excluída!")
