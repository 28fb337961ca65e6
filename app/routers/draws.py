"""Routes for managing draws (sorteios)."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.routers.auth import get_current_user
from app.schemas import DrawCreate, DrawUpdate

router = APIRouter(prefix="/draws", tags=["Draws"])


@router.get("/")
def list_draws(
    request: Request,
    edit: int | None = None,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    return templates.TemplateResponse(
        request,
        "draws/list.html",
        {
            "user": user,
            "draws": crud.list_draws(db),
            "editing": crud.get_draw(db, edit) if edit else None,
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


def _draw_fields(
    name: str, description: str, price: str, image_path: str, status: str | None, date_of_draw: str
) -> dict[str, object]:
    return {
        "name": name,
        "description": description,
        "price": price or "0",
        "image_path": image_path,
        # Unchecked checkboxes are not submitted.
        "status": status is not None and status.lower() not in ("", "0", "false", "off"),
        "date_of_draw": date_of_draw,
    }


@router.post("/new")
def create_draw(
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form("0"),
    image_path: str = Form(""),
    status: str | None = Form(None),
    date_of_draw: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    try:
        payload = DrawCreate(**_draw_fields(name, description, price, image_path, status, date_of_draw))
    except ValidationError as exc:
        return redirect_with("/draws/", error=validation_message(exc))
    crud.create_draw(db, payload)
    return redirect_with("/draws/", success="Sorteio salvo com sucesso!")


@router.post("/{draw_id}/edit")
def update_draw(
    draw_id: int,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form("0"),
    image_path: str = Form(""),
    status: str | None = Form(None),
    date_of_draw: str = Form(""),
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    draw = crud.get_draw(db, draw_id)
    if not draw:
        raise HTTPException(status_code=404, detail="Draw not found")
    try:
        payload = DrawUpdate(**_draw_fields(name, description, price, image_path, status, date_of_draw))
    except ValidationError as exc:
        return redirect_with("/draws/", edit=draw_id, error=validation_message(exc))
    crud.update_draw(db, draw, payload)
    return redirect_with("/draws/", success="Sorteio salvo com sucesso!")


@router.post("/{draw_id}/delete")
def delete_draw(
    draw_id: int,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    draw = crud.get_draw(db, draw_id)
    if not draw:
        raise HTTPException(status_code=404, detail="Draw not found")
    crud.delete_draw(db, draw)
    return redirect_with("/draws/", success="Sorteio excluído!")
