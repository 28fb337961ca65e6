from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_session
from app.auth import User
from app.models import Draw
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


def test_create_draw_from_form():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/draws/new",
            data={
                "name": "Mega Natal",
                "description": "Sorteio de fim de ano",
                "price": "0.99",
                "status": "1",
                "date_of_draw": "2026-12-24T20:00",
            },
            follow_redirects=False,
        )
        listing = client.get("/draws/")

    assert resp.status_code == 303
    draw = session.execute(select(Draw)).scalar_one()
    assert draw.name == "Mega Natal"
    assert draw.price == Decimal("0.99")
    assert draw.status is True
    assert draw.date_of_draw == datetime(2026, 12, 24, 20, 0)
    assert draw.image_path is None
    assert listing.status_code == 200
    assert "Mega Natal" in listing.text
    assert "24/12/2026 20:00" in listing.text


def test_unchecked_status_marks_draw_inactive():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        client.post("/draws/new", data={"name": "Rifa", "description": "Teste"}, follow_redirects=False)

    draw = session.execute(select(Draw)).scalar_one()
    assert draw.status is False
    assert draw.date_of_draw is None


def test_draw_requires_name_and_description():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post("/draws/new", data={"name": "", "description": ""}, follow_redirects=False)

    assert resp.status_code == 303
    assert "error=" in resp.headers["location"]
    assert session.execute(select(Draw)).first() is None


def test_draw_rejects_huge_price():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/draws/new", data={"name": "Rifa", "description": "Teste", "price": "1e30"}, follow_redirects=False
        )

    assert resp.status_code == 303
    assert "price" in resp.headers["location"]
    assert session.execute(select(Draw)).first() is None


def test_edit_and_delete_draw():
    session = _make_db()
    user = _user(session)
    draw = Draw(name="Rifa", description="Primeira", price=Decimal("1"), status=True)
    session.add(draw)
    session.commit()

    with _override_dependencies(session, user):
        client = TestClient(app)
        assert "Editar sorteio" in client.get(f"/draws/?edit={draw.id}").text
        resp = client.post(
            f"/draws/{draw.id}/edit",
            data={"name": "Rifa 2", "description": "Segunda", "price": "2.50", "status": "on"},
            follow_redirects=False,
        )
        assert resp.status_code == 303
        session.refresh(draw)
        assert draw.name == "Rifa 2"
        assert draw.price == Decimal("2.50")

        assert client.post(f"/draws/{draw.id}/delete", follow_redirects=False).status_code == 303
        assert client.post("/draws/999/edit", data={"name": "x", "description": "y"}).status_code == 404

    assert session.execute(select(Draw)).first() is None
