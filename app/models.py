"""SQLAlchemy models for the sorteio admin application.

Table names follow the hosted backend the dashboard was first built on, so the
same database can be pointed at through ``SORTEIO_DATABASE_URL``.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

PLAY_ENVIRONMENT_ENUM = ("sandbox", "producao")
PIX_KEY_TYPE_ENUM = ("cpf", "cnpj", "email", "telefone", "aleatoria")
DEFAULT_COMMISSION_PERCENT = Decimal("5")
DEFAULT_SALE_STATUS = "1"
LANDING_CONFIG_ID = "00000000-0000-0000-0000-000000000001"


def _new_uuid() -> str:
    return str(uuid.uuid4())


class Affiliate(Base):
    __tablename__ = "afiliados"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    customer_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    whatsapp: Mapped[str] = mapped_column(String(40), nullable=False)
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    commission_percent: Mapped[Decimal] = mapped_column(
        "comissao_percent", Numeric(7, 2), nullable=False, default=DEFAULT_COMMISSION_PERCENT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint("comissao_percent >= 0", name="ck_afiliados_commission_nonnegative"),
    )


class Customer(Base):
    __tablename__ = "customer_list"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    nome: Mapped[str | None] = mapped_column(String(200), nullable=True)
    telefone: Mapped[str] = mapped_column(String(40), nullable=False)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cpf: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )


class Sale(Base):
    """A purchase row of ``order_list``.

    ``customer_id`` and ``affiliate_id`` are plain columns: deleting a customer
    or an affiliate leaves the reference dangling instead of cascading.
    """

    __tablename__ = "order_list"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default=DEFAULT_SALE_STATUS)
    customer_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    customer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_created: Mapped[datetime | None] = mapped_column(DateTime, default=datetime.now, nullable=True)
    affiliate_id: Mapped[str | None] = mapped_column("afiliado_id", String(36), nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_order_list_amount_nonnegative"),
    )


class Draw(Base):
    __tablename__ = "sorteios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    date_of_draw: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_sorteios_price_nonnegative"),
    )


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )


# --- Landing page -----------------------------------------------------------

class LandingPageConfig(Base):
    __tablename__ = "landing_page_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=LANDING_CONFIG_ID)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    logo_alt: Mapped[str | None] = mapped_column(String(200), nullable=True)
    favicon_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    site_name: Mapped[str] = mapped_column(String(200), nullable=False, default="Mira Milionária")
    site_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta_keywords: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_banner_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    hero_banner_alt: Mapped[str | None] = mapped_column(String(200), nullable=True)
    hero_title: Mapped[str | None] = mapped_column(String(300), nullable=True)
    hero_subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    hero_cta_text: Mapped[str | None] = mapped_column(String(100), nullable=True)
    hero_cta_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    steps_section_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    steps_section_subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    steps_section_badge: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cta_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    cta_subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    cta_button_text: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cta_button_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    faq_section_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    faq_section_badge: Mapped[str | None] = mapped_column(String(100), nullable=True)
    instagram_section_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    instagram_section_subtitle: Mapped[str | None] = mapped_column(Text, nullable=True)
    instagram_section_badge: Mapped[str | None] = mapped_column(String(100), nullable=True)
    instagram_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    instagram_profile_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    footer_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    footer_copyright: Mapped[str | None] = mapped_column(String(300), nullable=True)
    footer_disclaimer: Mapped[str | None] = mapped_column(Text, nullable=True)
    whatsapp_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    whatsapp_display: Mapped[str | None] = mapped_column(String(40), nullable=True)
    email_contact: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary_color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )


class _LandingItemMixin:
    """Columns shared by every ordered list shown on the landing page."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    ordem: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now, nullable=False
    )


class LandingStep(_LandingItemMixin, Base):
    __tablename__ = "landing_page_steps"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class LandingFaq(_LandingItemMixin, Base):
    __tablename__ = "landing_page_faqs"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)


class LandingInstagramPost(_LandingItemMixin, Base):
    __tablename__ = "landing_page_instagram_posts"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    post_id: Mapped[str] = mapped_column(String(100), nullable=False)
    post_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)


class LandingNavLink(_LandingItemMixin, Base):
    __tablename__ = "landing_page_nav_links"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    href: Mapped[str] = mapped_column(String(500), nullable=False)
    is_external: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class LandingFooterLink(_LandingItemMixin, Base):
    __tablename__ = "landing_page_footer_links"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    href: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)


class LandingSocialLink(_LandingItemMixin, Base):
    __tablename__ = "landing_page_social_links"

    config_id: Mapped[str | None] = mapped_column(
        ForeignKey("landing_page_config.id", ondelete="CASCADE"), nullable=True, index=True
    )
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)


