"""Routes for managing affiliates."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.models import DEFAULT_COMMISSION_PERCENT
from app.routers.auth import get_current_user
from app.schemas import AffiliateCreate, AffiliateRead, AffiliateUpdate

router = APIRouter(prefix="/affiliates", tags=["Affiliates"])


def _payload(cls, customer_id: str | None, whatsapp: str, link: str | None, commission_percent: str):
    return cls(
        customer_id=customer_id,
        whatsapp=whatsapp,
        link=link,
        commission_percent=commission_percent or DEFAULT_COMMISSION_PERCENT,
    )


@router.get("/")
def list_affiliates(
    request: Request,
    page: int = 1,
    edit: str | None = None,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    result = crud.list_affiliates(db, page)
    editing = crud.get_affiliate(db, edit) if edit else None
    return templates.TemplateResponse(
        request,
        "affiliates/list.html",
        {
            "user": user,
            "page": result,
            "editing": editing,
            "default_commission": DEFAULT_COMMISSION_PERCENT,
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


@router.post("/new")
def create_affiliate(
    customer_id: str = Form(""),
    whatsapp: str = Form(""),
    link: str = Form(""),
    commission_percent: str = Form(str(DEFAULT_COMMISSION_PERCENT)),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    try:
        payload = _payload(AffiliateCreate, customer_id, whatsapp, link, commission_percent)
    except ValidationError as exc:
        return redirect_with("/affiliates/", error=validation_message(exc))
    crud.create_affiliate(db, payload)
    return redirect_with("/affiliates/", success="Afiliado salvo com sucesso!")


@router.post("/{affiliate_id}/edit")
def update_affiliate(
    affiliate_id: str,
    customer_id: str = Form(""),
    whatsapp: str = Form(""),
    link: str = Form(""),
    commission_percent: str = Form(str(DEFAULT_COMMISSION_PERCENT)),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    affiliate = crud.get_affiliate(db, affiliate_id)
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate not found")
    try:
        payload = _payload(AffiliateUpdate, customer_id, whatsapp, link, commission_percent)
    except ValidationError as exc:
        return redirect_with("/affiliates/", edit=affiliate_id, error=validation_message(exc))
    crud.update_affiliate(db, affiliate, payload)
    return redirect_with("/affiliates/", success="Afiliado salvo com sucesso!")


@router.post("/{affiliate_id}/delete")
def delete_affiliate(
    affiliate_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    affiliate = crud.get_affiliate(db, affiliate_id)
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate not found")
    crud.delete_affiliate(db, affiliate)
    return redirect_with("/affiliates/", success="Afiliado excluído!")


@router.get("/{affiliate_id}.json")
def affiliate_json(
    affiliate_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    affiliate = crud.get_affiliate(db, affiliate_id)
    if not affiliate:
        raise HTTPException(status_code=404, detail="Affiliate not found")
    return AffiliateRead.model_validate(affiliate).model_dump(mode="json")
