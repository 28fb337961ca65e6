"""Routes for managing customers and browsing their purchase history."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.commission import build_customer_history
from app.core.formatting import format_display_datetime
from app.core.sales_status import classify_status, status_label
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.routers.auth import get_current_user
from app.schemas import CustomerCreate, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/")
def list_customers(
    request: Request,
    page: int = 1,
    edit: str | None = None,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    result = crud.list_customers(db, page)
    editing = crud.get_customer(db, edit) if edit else None
    return templates.TemplateResponse(
        request,
        "customers/list.html",
        {
            "user": user,
            "page": result,
            "editing": editing,
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


@router.post("/new")
def create_customer(
    nome: str = Form(""),
    telefone: str = Form(""),
    email: str = Form(""),
    cpf: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    try:
        payload = CustomerCreate(nome=nome, telefone=telefone, email=email, cpf=cpf)
    except ValidationError as exc:
        return redirect_with("/customers/", error=validation_message(exc))
    crud.create_customer(db, payload)
    return redirect_with("/customers/", success="Cliente salvo com sucesso!")


@router.post("/{customer_id}/edit")
def update_customer(
    customer_id: str,
    nome: str = Form(""),
    telefone: str = Form(""),
    email: str = Form(""),
    cpf: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    customer = crud.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    try:
        payload = CustomerUpdate(nome=nome, telefone=telefone, email=email, cpf=cpf)
    except ValidationError as exc:
        return redirect_with("/customers/", edit=customer_id, error=validation_message(exc))
    crud.update_customer(db, customer, payload)
    return redirect_with("/customers/", success="Cliente salvo com sucesso!")


@router.post("/{customer_id}/delete")
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    customer = crud.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    crud.delete_customer(db, customer)
    return redirect_with("/customers/", success="Cliente excluído!")


@router.get("/{customer_id}/history")
def customer_history(
    customer_id: str,
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    customer = crud.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    history = build_customer_history(db, customer)
    return templates.TemplateResponse(
        request,
        "customers/history.html",
        {"user": user, "customer": customer, "history": history},
    )


@router.get("/{customer_id}/history.json")
def customer_history_json(
    customer_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    customer = crud.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    history = build_customer_history(db, customer)

    rows = []
    for entry in history.entries:
        sale = entry.sale
        rows.append(
            {
                "id": sale.id,
                "code": sale.code,
                "product_name": sale.product_name,
                "total_amount": str(entry.record.amount),
                "status": sale.status,
                "status_label": status_label(sale.status),
                "status_class": classify_status(sale.status),
                "payment_method": sale.payment_method,
                "date_created": sale.date_created.isoformat() if sale.date_created else None,
                "date_created_display": format_display_datetime(sale.date_created) or None,
                "affiliate": (
                    {
                        "id": entry.affiliate.id,
                        "whatsapp": entry.affiliate.contact_handle,
                        "commission_percent": str(entry.affiliate.commission_rate),
                    }
                    if entry.affiliate
                    else None
                ),
                "commission": str(entry.commission),
            }
        )

    return JSONResponse(
        content={
            "customer": {
                "id": customer.id,
                "nome": customer.nome,
                "telefone": customer.telefone,
                "email": customer.email,
            },
            "transactions": rows,
            "summary": {
                "count": len(rows),
                "total_spent": str(history.total_spent),
                "total_commission": str(history.total_commission),
            },
        }
    )
