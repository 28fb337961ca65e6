"""Landing page editor: the config row plus the ordered list sections."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.landing import CONFIG_GROUPS, SECTIONS, SectionSpec, get_section, parse_config_form, parse_section_form
from app.routers.auth import get_current_user

router = APIRouter(prefix="/landing", tags=["Landing"])


def _section_or_404(slug: str) -> SectionSpec:
    section = get_section(slug)
    if section is None:
        raise HTTPException(status_code=404, detail="Section not found")
    return section


def _ensure_config(db: Session) -> None:
    if crud.get_landing_config(db) is None:
        crud.upsert_landing_config(db, {})


@router.get("")
def landing_page(
    request: Request,
    section: str | None = None,
    edit: str | None = None,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    items = {slug: crud.list_landing_items(db, spec.model) for slug, spec in SECTIONS.items()}
    editing = None
    if section and edit:
        spec = _section_or_404(section)
        editing = next((item for item in items[spec.slug] if item.id == edit), None)
    return templates.TemplateResponse(
        request,
        "landing/index.html",
        {
            "user": user,
            "config": crud.get_landing_config(db),
            "config_groups": CONFIG_GROUPS,
            "sections": SECTIONS,
            "items": items,
            "editing_section": section if editing is not None else None,
            "editing": editing,
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


@router.post("/config")
async def save_config(
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    form = await request.form()
    try:
        values = parse_config_form(dict(form))
    except ValidationError as exc:
        return redirect_with("/landing", error=validation_message(exc))
    crud.upsert_landing_config(db, values)
    return redirect_with("/landing", success="Configurações da landing page salvas!")


@router.post("/{slug}/new")
async def create_item(
    slug: str,
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    section = _section_or_404(slug)
    form = await request.form()
    try:
        values = parse_section_form(section, dict(form))
    except ValidationError as exc:
        return redirect_with("/landing", error=validation_message(exc))
    _ensure_config(db)
    crud.save_landing_item(db, section.model, values)
    return redirect_with("/landing", success=f"{section.title}: item adicionado!")


@router.post("/{slug}/{item_id}/edit")
async def update_item(
    slug: str,
    item_id: str,
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    section = _section_or_404(slug)
    form = await request.form()
    try:
        values = parse_section_form(section, dict(form))
    except ValidationError as exc:
        return redirect_with("/landing", section=slug, edit=item_id, error=validation_message(exc))
    item = crud.save_landing_item(db, section.model, values, item_id=item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return redirect_with("/landing", success=f"{section.title}: item atualizado!")


@router.post("/{slug}/{item_id}/delete")
def delete_item(
    slug: str,
    item_id: str,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    section = _section_or_404(slug)
    if not crud.delete_landing_item(db, section.model, item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return redirect_with("/landing", success=f"{section.title}: item removido!")
