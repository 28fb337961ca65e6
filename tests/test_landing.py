from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import crud
from app.main import app
from app.database import Base, get_session
from app.auth import User
from app.landing import SECTIONS, get_section, parse_config_form, parse_section_form
from app.models import LANDING_CONFIG_ID, LandingFaq, LandingNavLink, LandingPageConfig, LandingStep
from app.routers.auth import get_current_user


def _make_db():
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


@contextmanager
def _override_dependencies(session, user):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_session, None)
        app.dependency_overrides.pop(get_current_user, None)


def _user(session):
    user = User.create_user("operador", "password", role="user")
    session.add(user)
    session.commit()
    return user


def test_every_section_is_registered():
    assert set(SECTIONS) == {"steps", "faqs", "instagram", "nav-links", "footer-links", "social-links"}
    assert get_section("faqs").model is LandingFaq
    assert get_section("unknown") is None


def test_section_form_reads_missing_checkboxes_as_false():
    values = parse_section_form(get_section("nav-links"), {"label": "FAQ", "href": "#faq", "ordem": ""})

    assert values["is_active"] is False
    assert values["is_external"] is False
    assert values["ordem"] == 0


def test_section_form_requires_fields():
    with pytest.raises(ValidationError):
        parse_section_form(get_section("faqs"), {"question": "Como funciona?"})


def test_config_form_blank_fields_become_null():
    values = parse_config_form({"site_name": "Mira", "hero_title": "  ", "is_active": "1"})

    assert values["site_name"] == "Mira"
    assert values["hero_title"] is None
    assert values["is_active"] is True
    with pytest.raises(ValidationError):
        parse_config_form({"site_name": ""})


def test_save_config_creates_single_row():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        first = client.post(
            "/landing/config",
            data={"site_name": "Mira Milionária", "hero_title": "Concorra hoje", "is_active": "1"},
            follow_redirects=False,
        )
        second = client.post(
            "/landing/config",
            data={"site_name": "Mira", "primary_color": "#0f766e"},
            follow_redirects=False,
        )

    assert first.status_code == 303
    assert second.status_code == 303
    rows = session.execute(select(LandingPageConfig)).scalars().all()
    assert len(rows) == 1
    assert rows[0].id == LANDING_CONFIG_ID
    assert rows[0].site_name == "Mira"
    assert rows[0].primary_color == "#0f766e"
    assert rows[0].is_active is False


def test_add_items_are_listed_by_order():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        client.post("/landing/steps/new", data={"title": "Pague", "ordem": "2", "is_active": "1"})
        client.post("/landing/steps/new", data={"title": "Escolha", "ordem": "1", "is_active": "1"})
        page = client.get("/landing")

    steps = crud.list_landing_items(session, LandingStep)
    assert [step.title for step in steps] == ["Escolha", "Pague"]
    assert all(step.config_id == LANDING_CONFIG_ID for step in steps)
    assert crud.get_landing_config(session) is not None
    assert page.status_code == 200
    assert "Escolha" in page.text


def test_edit_and_delete_item():
    session = _make_db()
    user = _user(session)
    crud.upsert_landing_config(session, {})
    faq = crud.save_landing_item(session, LandingFaq, {"question": "Q?", "answer": "A.", "ordem": 0, "is_active": True})

    with _override_dependencies(session, user):
        client = TestClient(app)
        assert "Editar item" in client.get(f"/landing?section=faqs&edit={faq.id}").text
        resp = client.post(
            f"/landing/faqs/{faq.id}/edit",
            data={"question": "Quando é o sorteio?", "answer": "Todo sábado.", "ordem": "3"},
            follow_redirects=False,
        )
        assert resp.status_code == 303
        session.refresh(faq)
        assert faq.question == "Quando é o sorteio?"
        assert faq.is_active is False

        assert client.post(f"/landing/faqs/{faq.id}/delete", follow_redirects=False).status_code == 303
        assert client.post(f"/landing/faqs/{faq.id}/delete", follow_redirects=False).status_code == 404

    assert crud.list_landing_items(session, LandingFaq) == []


def test_unknown_section_and_invalid_item():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        unknown = client.post("/landing/banners/new", data={"title": "x"}, follow_redirects=False)
        invalid = client.post("/landing/nav-links/new", data={"label": "Sem destino"}, follow_redirects=False)
        missing = client.post(
            "/landing/nav-links/does-not-exist/edit", data={"label": "a", "href": "#a"}, follow_redirects=False
        )

    assert unknown.status_code == 404
    assert invalid.status_code == 303
    assert "error=" in invalid.headers["location"]
    assert session.execute(select(LandingNavLink)).first() is None
    assert missing.status_code == 404
