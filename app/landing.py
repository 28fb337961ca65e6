"""Landing page content: the single config row and its ordered sections.

Each list section (steps, FAQs, ...) is described once in ``SECTIONS``: its
table, the pydantic schema validating submitted forms, and the fields the
generic editor renders. The routes in :mod:`app.routers.landing` work off this
registry only, so adding a section means adding one entry here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models import (
    LandingFaq,
    LandingFooterLink,
    LandingInstagramPost,
    LandingNavLink,
    LandingPageConfig,
    LandingSocialLink,
    LandingStep,
)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = "text"  # text | textarea | url | number | checkbox | color
    required: bool = False
    placeholder: str = ""


@dataclass(frozen=True)
class SectionSpec:
    slug: str
    title: str
    model: Any
    schema: Type[BaseModel]
    fields: tuple[FieldSpec, ...]
    summary_field: str


def _none_if_blank(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class _ItemBase(BaseModel):
    ordem: int = 0
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    @field_validator("ordem", mode="before")
    def blank_order(cls, value: Any) -> Any:
        return 0 if value in (None, "") else value


class StepForm(_ItemBase):
    icon: str = ""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""


class FaqForm(_ItemBase):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class InstagramPostForm(_ItemBase):
    post_id: str = Field(..., min_length=1, max_length=100)
    post_url: Optional[str] = None
    image_url: Optional[str] = None
    caption: Optional[str] = None

    @field_validator("post_url", "image_url", "caption", mode="before")
    def blanks(cls, value: Any) -> Any:
        return _none_if_blank(value)


class NavLinkForm(_ItemBase):
    label: str = Field(..., min_length=1, max_length=100)
    href: str = Field(..., min_length=1, max_length=500)
    is_external: bool = False


class FooterLinkForm(_ItemBase):
    label: str = Field(..., min_length=1, max_length=100)
    href: str = Field(..., min_length=1, max_length=500)
    category: Optional[str] = None

    @field_validator("category", mode="before")
    def blanks(cls, value: Any) -> Any:
        return _none_if_blank(value)


class SocialLinkForm(_ItemBase):
    platform: str = Field(..., min_length=1, max_length=50)
    url: str = Field(..., min_length=1, max_length=500)
    icon: Optional[str] = None

    @field_validator("icon", mode="before")
    def blanks(cls, value: Any) -> Any:
        return _none_if_blank(value)


_ORDER = FieldSpec("ordem", "Ordem", "number")
_ACTIVE = FieldSpec("is_active", "Ativo", "checkbox")

SECTIONS: dict[str, SectionSpec] = {
    spec.slug: spec
    for spec in (
        SectionSpec(
            "steps",
            "Como funciona",
            LandingStep,
            StepForm,
            (
                FieldSpec("icon", "Ícone", placeholder="ticket"),
                FieldSpec("title", "Título", required=True),
                FieldSpec("description", "Descrição", "textarea"),
                _ORDER,
                _ACTIVE,
            ),
            "title",
        ),
        SectionSpec(
            "faqs",
            "Perguntas frequentes",
            LandingFaq,
            FaqForm,
            (
                FieldSpec("question", "Pergunta", required=True),
                FieldSpec("answer", "Resposta", "textarea", required=True),
                _ORDER,
                _ACTIVE,
            ),
            "question",
        ),
        SectionSpec(
            "instagram",
            "Posts do Instagram",
            LandingInstagramPost,
            InstagramPostForm,
            (
                FieldSpec("post_id", "ID do post", required=True),
                FieldSpec("post_url", "URL do post", "url"),
                FieldSpec("image_url", "URL da imagem", "url"),
                FieldSpec("caption", "Legenda", "textarea"),
                _ORDER,
                _ACTIVE,
            ),
            "post_id",
        ),
        SectionSpec(
            "nav-links",
            "Links do menu",
            LandingNavLink,
            NavLinkForm,
            (
                FieldSpec("label", "Texto", required=True),
                FieldSpec("href", "Destino", required=True, placeholder="#como-funciona"),
                FieldSpec("is_external", "Abre em nova aba", "checkbox"),
                _ORDER,
                _ACTIVE,
            ),
            "label",
        ),
        SectionSpec(
            "footer-links",
            "Links do rodapé",
            LandingFooterLink,
            FooterLinkForm,
            (
                FieldSpec("label", "Texto", required=True),
                FieldSpec("href", "Destino", required=True),
                FieldSpec("category", "Categoria"),
                _ORDER,
                _ACTIVE,
            ),
            "label",
        ),
        SectionSpec(
            "social-links",
            "Redes sociais",
            LandingSocialLink,
            SocialLinkForm,
            (
                FieldSpec("platform", "Plataforma", required=True),
                FieldSpec("url", "URL", "url", required=True),
                FieldSpec("icon", "Ícone"),
                _ORDER,
                _ACTIVE,
            ),
            "platform",
        ),
    )
}


def get_section(slug: str) -> SectionSpec | None:
    return SECTIONS.get(slug)


def parse_section_form(section: SectionSpec, form: dict[str, Any]) -> dict[str, Any]:
    """Validate raw form fields for ``section`` and return column values.

    Unchecked HTML checkboxes are absent from the submitted form, so every
    checkbox field missing from ``form`` is read as ``False``.
    """
    data: dict[str, Any] = {}
    for spec in section.fields:
        if spec.kind == "checkbox":
            data[spec.name] = spec.name in form and str(form[spec.name]).lower() not in ("", "0", "false", "off")
        elif spec.name in form:
            data[spec.name] = form[spec.name]
    return section.schema(**data).model_dump()


# --- Config row ---------------------------------------------------------------

CONFIG_GROUPS: tuple[tuple[str, tuple[FieldSpec, ...]], ...] = (
    (
        "Identidade",
        (
            FieldSpec("site_name", "Nome do site", required=True),
            FieldSpec("site_description", "Descrição", "textarea"),
            FieldSpec("meta_keywords", "Palavras-chave"),
            FieldSpec("logo_url", "Logo (URL)", "url"),
            FieldSpec("logo_alt", "Texto alternativo do logo"),
            FieldSpec("favicon_url", "Favicon (URL)", "url"),
            FieldSpec("primary_color", "Cor primária", "color"),
            FieldSpec("secondary_color", "Cor secundária", "color"),
        ),
    ),
    (
        "Banner principal",
        (
            FieldSpec("hero_banner_url", "Banner (URL)", "url"),
            FieldSpec("hero_banner_alt", "Texto alternativo do banner"),
            FieldSpec("hero_title", "Título"),
            FieldSpec("hero_subtitle", "Subtítulo", "textarea"),
            FieldSpec("hero_cta_text", "Texto do botão"),
            FieldSpec("hero_cta_link", "Link do botão"),
        ),
    ),
    (
        "Seções",
        (
            FieldSpec("steps_section_title", "Título - como funciona"),
            FieldSpec("steps_section_subtitle", "Subtítulo - como funciona", "textarea"),
            FieldSpec("steps_section_badge", "Selo - como funciona"),
            FieldSpec("cta_title", "Título da chamada"),
            FieldSpec("cta_subtitle", "Subtítulo da chamada", "textarea"),
            FieldSpec("cta_button_text", "Texto do botão da chamada"),
            FieldSpec("cta_button_link", "Link do botão da chamada"),
            FieldSpec("faq_section_title", "Título - FAQ"),
            FieldSpec("faq_section_badge", "Selo - FAQ"),
            FieldSpec("instagram_section_title", "Título - Instagram"),
            FieldSpec("instagram_section_subtitle", "Subtítulo - Instagram", "textarea"),
            FieldSpec("instagram_section_badge", "Selo - Instagram"),
            FieldSpec("instagram_username", "Usuário do Instagram"),
            FieldSpec("instagram_profile_url", "Perfil do Instagram (URL)", "url"),
        ),
    ),
    (
        "Rodapé e contato",
        (
            FieldSpec("footer_description", "Descrição do rodapé", "textarea"),
            FieldSpec("footer_copyright", "Copyright"),
            FieldSpec("footer_disclaimer", "Aviso legal", "textarea"),
            FieldSpec("whatsapp_number", "WhatsApp", placeholder="5511999999999"),
            FieldSpec("whatsapp_display", "WhatsApp (exibição)"),
            FieldSpec("email_contact", "Email de contato"),
            FieldSpec("address", "Endereço", "textarea"),
            FieldSpec("is_active", "Página ativa", "checkbox"),
        ),
    ),
)


class LandingConfigForm(BaseModel):
    site_name: str = Field(..., min_length=1, max_length=200)
    is_active: bool = True

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)


def parse_config_form(form: dict[str, Any]) -> dict[str, Any]:
    """Validate the config form; blank optional fields are stored as NULL."""
    columns = set(LandingPageConfig.__table__.columns.keys()) - {"id", "updated_at"}
    data: dict[str, Any] = {}
    for _, fields in CONFIG_GROUPS:
        for spec in fields:
            if spec.name not in columns:
                continue
            if spec.kind == "checkbox":
                data[spec.name] = spec.name in form and str(form[spec.name]).lower() not in ("", "0", "false", "off")
            elif spec.name in form:
                data[spec.name] = _none_if_blank(form[spec.name])
    validated = LandingConfigForm(**data)
    return validated.model_dump()
