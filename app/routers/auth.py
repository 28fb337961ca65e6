"""Authentication routes and session management."""
from __future__ import annotations

import logging
import os
from datetime import datetime

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from app.auth import User
from app.database import get_session
from app.dependencies import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

SESSION_COOKIE = "user_id"
SESSION_MAX_AGE = 86400


def _safe_redirect_target(value: str | None) -> str:
    # Same-site paths only.
    if not value or "://" in value or not value.startswith("/") or value.startswith("//"):
        return "/dashboard"
    return value


@router.get("/login")
def login_page(request: Request):
    next_param = request.query_params.get("next")
    return templates.TemplateResponse(request, "auth/login.html", {"next": next_param})


@router.post("/login")
def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    next: str | None = Form(default=None),
    db: Session = Depends(get_session),
):
    user = db.query(User).filter(User.username == username).first()
    if not user or not user.verify_password(password):
        logger.info("Failed login for %r from %s", username, request.client.host if request.client else "unknown")
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {"error": "Usuário ou senha inválidos", "next": next},
            status_code=401,
        )

    user.last_login_at = datetime.now()
    db.commit()

    response = RedirectResponse(url=_safe_redirect_target(next), status_code=303)
    is_production = os.getenv("SORTEIO_DATABASE_URL", "").startswith("postgresql")
    response.set_cookie(
        key=SESSION_COOKIE,
        value=str(user.id),
        httponly=True,
        path="/",
        secure=is_production,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
    )
    return response


@router.get("/logout")
def logout():
    response = RedirectResponse(url="/login", status_code=303)
    response.delete_cookie(SESSION_COOKIE)
    return response


def get_current_user(request: Request, db: Session = Depends(get_session)) -> User:
    """Dependency returning the logged-in user or raising 401."""
    raw_id = request.cookies.get(SESSION_COOKIE)
    if not raw_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user_id = int(raw_id)
    except (ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid session")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin():
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
