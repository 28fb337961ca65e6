"""Database access helpers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.models import (
    LANDING_CONFIG_ID,
    Affiliate,
    Customer,
    Draw,
    LandingFaq,
    LandingFooterLink,
    LandingInstagramPost,
    LandingNavLink,
    LandingPageConfig,
    LandingSocialLink,
    LandingStep,
    Sale,
    SystemSetting,
)
from app.schemas import (
    AffiliateCreate,
    AffiliateUpdate,
    CustomerCreate,
    CustomerUpdate,
    DrawCreate,
    DrawUpdate,
    SaleCreate,
    SaleUpdate,
)

PAGE_SIZE = 10

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    total: int
    page_size: int = PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size)) if self.total else 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _paginate(db: Session, model: Type[T], order_by, page: int, page_size: int = PAGE_SIZE) -> Page[T]:
    page = max(1, page)
    offset = (page - 1) * page_size
    stmt = select(model).order_by(*order_by).offset(offset).limit(page_size)
    items = db.execute(stmt).scalars().all()
    return Page(items=items, page=page, total=count_rows(db, model), page_size=page_size)


def count_rows(db: Session, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def _apply(instance: Any, payload: BaseModel) -> None:
    for key, value in payload.model_dump().items():
        setattr(instance, key, value)


# --- Affiliates ---------------------------------------------------------------

def list_affiliates(db: Session, page: int = 1) -> Page[Affiliate]:
    return _paginate(db, Affiliate, (Affiliate.created_at.desc(), Affiliate.id), page)


def all_affiliates(db: Session) -> Sequence[Affiliate]:
    """Full affiliate directory, unpaginated."""
    return db.execute(select(Affiliate).order_by(Affiliate.created_at.desc(), Affiliate.id)).scalars().all()


def get_affiliate(db: Session, affiliate_id: str) -> Affiliate | None:
    return db.get(Affiliate, affiliate_id)


def create_affiliate(db: Session, payload: AffiliateCreate) -> Affiliate:
    affiliate = Affiliate(**payload.model_dump())
    db.add(affiliate)
    db.commit()
    db.refresh(affiliate)
    return affiliate


def update_affiliate(db: Session, affiliate: Affiliate, payload: AffiliateUpdate) -> Affiliate:
    _apply(affiliate, payload)
    db.add(affiliate)
    db.commit()
    db.refresh(affiliate)
    return affiliate


def delete_affiliate(db: Session, affiliate: Affiliate) -> None:
    # Sales keep their afiliado_id; they simply stop earning commission.
    db.delete(affiliate)
    db.commit()


# --- Customers ----------------------------------------------------------------

def list_customers(db: Session, page: int = 1) -> Page[Customer]:
    return _paginate(db, Customer, (Customer.created_at.desc(), Customer.id), page)


def get_customer(db: Session, customer_id: str) -> Customer | None:
    return db.get(Customer, customer_id)


def create_customer(db: Session, payload: CustomerCreate) -> Customer:
    customer = Customer(**payload.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def update_customer(db: Session, customer: Customer, payload: CustomerUpdate) -> Customer:
    _apply(customer, payload)
    customer.updated_at = datetime.now()
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer: Customer) -> None:
    db.delete(customer)
    db.commit()


# --- Sales --------------------------------------------------------------------

def list_sales(db: Session, page: int = 1) -> Page[Sale]:
    return _paginate(db, Sale, (Sale.date_created.desc(), Sale.id.desc()), page)


def all_sales(db: Session) -> Sequence[Sale]:
    """Full sales ledger, unpaginated."""
    return db.execute(select(Sale).order_by(Sale.id)).scalars().all()


def list_sales_for_customer(db: Session, customer_id: str) -> Sequence[Sale]:
    stmt = (
        select(Sale)
        .where(Sale.customer_id == customer_id)
        .order_by(Sale.date_created.desc(), Sale.id.desc())
    )
    return db.execute(stmt).scalars().all()


def get_sale(db: Session, sale_id: int) -> Sale | None:
    return db.get(Sale, sale_id)


def create_sale(db: Session, payload: SaleCreate) -> Sale:
    sale = Sale(**payload.model_dump(), date_created=datetime.now())
    db.add(sale)
    db.commit()
    db.refresh(sale)
    return sale


def update_sale(db: Session, sale: Sale, payload: SaleUpdate) -> Sale:
    _apply(sale, payload)
    db.add(sale)
    db.commit()
    db.refresh(sale)
    return sale


def delete_sale(db: Session, sale: Sale) -> None:
    db.delete(sale)
    db.commit()


# --- Draws --------------------------------------------------------------------

def list_draws(db: Session) -> Sequence[Draw]:
    stmt = select(Draw).order_by(Draw.date_of_draw.desc(), Draw.id.desc())
    return db.execute(stmt).scalars().all()


def get_draw(db: Session, draw_id: int) -> Draw | None:
    return db.get(Draw, draw_id)


def create_draw(db: Session, payload: DrawCreate) -> Draw:
    draw = Draw(**payload.model_dump())
    db.add(draw)
    db.commit()
    db.refresh(draw)
    return draw


def update_draw(db: Session, draw: Draw, payload: DrawUpdate) -> Draw:
    _apply(draw, payload)
    db.add(draw)
    db.commit()
    db.refresh(draw)
    return draw


def delete_draw(db: Session, draw: Draw) -> None:
    db.delete(draw)
    db.commit()


# --- Landing page -------------------------------------------------------------

def get_landing_config(db: Session, config_id: str = LANDING_CONFIG_ID) -> LandingPageConfig | None:
    return db.get(LandingPageConfig, config_id)


def upsert_landing_config(
    db: Session, values: dict[str, Any], config_id: str = LANDING_CONFIG_ID
) -> LandingPageConfig:
    config = db.get(LandingPageConfig, config_id)
    if config is None:
        config = LandingPageConfig(id=config_id)
    for key, value in values.items():
        setattr(config, key, value)
    config.updated_at = datetime.now()
    db.add(config)
    db.commit()
    db.refresh(config)
    return config


def list_landing_items(db: Session, model, config_id: str = LANDING_CONFIG_ID) -> Sequence[Any]:
    stmt = select(model).where(model.config_id == config_id).order_by(model.ordem, model.created_at)
    return db.execute(stmt).scalars().all()


def save_landing_item(
    db: Session,
    model,
    values: dict[str, Any],
    item_id: str | None = None,
    config_id: str = LANDING_CONFIG_ID,
):
    """Insert a new section item, or update ``item_id`` when given."""
    if item_id:
        item = db.get(model, item_id)
        if item is None:
            return None
        item.updated_at = datetime.now()
    else:
        item = model(config_id=config_id)
    for key, value in values.items():
        setattr(item, key, value)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def delete_landing_item(db: Session, model, item_id: str) -> bool:
    item = db.get(model, item_id)
    if item is None:
        return False
    db.delete(item)
    db.commit()
    return True


# --- Maintenance --------------------------------------------------------------

def reset_application_data(db: Session) -> None:
    """Delete every business row while keeping user accounts."""
    for model in (
        LandingStep,
        LandingFaq,
        LandingInstagramPost,
        LandingNavLink,
        LandingFooterLink,
        LandingSocialLink,
        LandingPageConfig,
        SystemSetting,
        Sale,
        Draw,
        Affiliate,
        Customer,
    ):
        db.execute(delete(model))
    db.commit()
