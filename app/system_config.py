"""System settings stored as key/value rows.

The settings screen used to keep these values in the browser. They now live
in the ``system_settings`` table and are loaded and saved explicitly as one
:class:`SystemConfig` object.
"""
from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import PIX_KEY_TYPE_ENUM, PLAY_ENVIRONMENT_ENUM, SystemSetting

logger = logging.getLogger(__name__)

SECRET_FIELDS = ("play_client_id", "play_client_secret", "whatsapp_token")


class SystemConfig(BaseModel):
    play_client_id: str = ""
    play_client_secret: str = ""
    play_webhook_url: str = ""
    play_ambiente: str = "sandbox"
    pix_chave: str = ""
    pix_tipo_chave: str = "cpf"
    pix_beneficiario: str = ""
    whatsapp_token: str = ""
    whatsapp_numero: str = ""
    whatsapp_instancia: str = ""
    nome_sistema: str = "Mira Milionária"
    url_sistema: str = ""
    email_suporte: str = ""

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("*", mode="before")
    def none_to_blank(cls, value):
        return "" if value is None else value

    @field_validator("play_ambiente")
    def validate_environment(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in PLAY_ENVIRONMENT_ENUM:
            raise ValueError("Environment must be sandbox or producao.")
        return normalized

    @field_validator("pix_tipo_chave")
    def validate_pix_key_type(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in PIX_KEY_TYPE_ENUM:
            raise ValueError("PIX key type must be one of: " + ", ".join(PIX_KEY_TYPE_ENUM) + ".")
        return normalized

    @field_validator("play_webhook_url", "url_sistema")
    def validate_url(cls, value: str) -> str:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("URLs must start with http:// or https://.")
        return value


def mask_secret(value: str) -> str:
    """Hide all but the last four characters of a credential."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def load_stored_values(db: Session) -> dict[str, str]:
    """Raw stored values for known settings, unvalidated."""
    rows = db.execute(select(SystemSetting)).scalars().all()
    known = set(SystemConfig.model_fields)
    return {row.key: row.value for row in rows if row.key in known and row.value is not None}


def load_system_config(db: Session) -> SystemConfig:
    values = load_stored_values(db)
    try:
        return SystemConfig(**values)
    except ValidationError as exc:
        # A bad stored value should not lock the operator out of the screen.
        logger.warning("Stored system settings are invalid, using defaults: %s", exc)
        return SystemConfig()


def save_system_config(db: Session, config: SystemConfig) -> SystemConfig:
    existing = {row.key: row for row in db.execute(select(SystemSetting)).scalars().all()}
    now = datetime.now()
    for key, value in config.model_dump().items():
        row = existing.get(key)
        if row is None:
            db.add(SystemSetting(key=key, value=value, updated_at=now))
        elif row.value != value:
            row.value = value
            row.updated_at = now
    db.commit()
    logger.info("System settings saved")
    return config


def masked_view(config: SystemConfig) -> dict[str, str]:
    data = config.model_dump()
    for name in SECRET_FIELDS:
        data[name] = mask_secret(data[name])
    return data
