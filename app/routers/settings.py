"""System settings screen (payment gateway, PIX, WhatsApp, general)."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.auth import User
from app.database import get_session
from app.dependencies import redirect_with, templates, validation_message
from app.models import PIX_KEY_TYPE_ENUM, PLAY_ENVIRONMENT_ENUM
from app.routers.auth import get_admin_user, get_current_user
from app.system_config import (
    SECRET_FIELDS,
    SystemConfig,
    load_stored_values,
    load_system_config,
    mask_secret,
    masked_view,
    save_system_config,
)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("")
def settings_page(
    request: Request,
    reveal: bool = False,
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    config = load_system_config(db)
    show_secrets = reveal and user.is_admin()
    values = config.model_dump() if show_secrets else masked_view(config)
    return templates.TemplateResponse(
        request,
        "settings/index.html",
        {
            "user": user,
            "values": values,
            "secret_fields": SECRET_FIELDS,
            "show_secrets": show_secrets,
            "environment_options": PLAY_ENVIRONMENT_ENUM,
            "pix_key_type_options": PIX_KEY_TYPE_ENUM,
            "error_message": request.query_params.get("error"),
            "success_message": request.query_params.get("success"),
        },
    )


@router.post("")
async def save_settings(
    request: Request,
    db: Session = Depends(get_session),
    user: User = Depends(get_admin_user),  # noqa: ARG001 - admin only
):
    form = await request.form()
    # Raw stored rows, so one invalid value does not reset the others.
    current = {**SystemConfig().model_dump(), **load_stored_values(db)}
    submitted = {name: form.get(name) for name in SystemConfig.model_fields if name in form}
    for name in SECRET_FIELDS:
        # A masked value coming back untouched keeps the stored secret.
        if submitted.get(name) and submitted[name] == mask_secret(current[name]):
            submitted[name] = current[name]
    current.update(submitted)
    try:
        config = SystemConfig(**current)
    except ValidationError as exc:
        return redirect_with("/settings", error=validation_message(exc))
    save_system_config(db, config)
    return redirect_with("/settings", success="Configurações salvas com sucesso!")


@router.get("/data")
def settings_data(
    db: Session = Depends(get_session),
    user: User = Depends(get_current_user),  # noqa: ARG001 - ensure auth
):
    return masked_view(load_system_config(db))
