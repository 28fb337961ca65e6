from contextlib import contextmanager
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import crud
from app.main import app
from app.database import Base, get_session
from app.auth import User
from app.models import Affiliate, Customer, Sale
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


def test_dashboard_empty_database():
    session = _make_db()
    user = User.create_user("operador", "password", role="user")
    session.add(user)
    session.commit()

    with _override_dependencies(session, user):
        client = TestClient(app)
        page = client.get("/dashboard")
        data = client.get("/dashboard/data").json()

    assert page.status_code == 200
    assert "R$ 0,00" in page.text
    assert data["sale_count"] == 0
    assert Decimal(data["revenue"]) == 0
    assert Decimal(data["total_commission"]) == 0


def test_dashboard_revenue_counts_every_sale():
    session = _make_db()
    user = User.create_user("operador", "password", role="user")
    session.add_all(
        [
            user,
            Affiliate(id="aff-1", whatsapp="5511900001111", commission_percent=Decimal("10")),
            Customer(nome="Lia", telefone="5511900002222"),
            Sale(code="S1", product_name="Cota", total_amount=Decimal("1200.00"), affiliate_id="aff-1"),
            Sale(code="S2", product_name="Cota", total_amount=Decimal("300.00"), status="0"),
        ]
    )
    session.commit()

    with _override_dependencies(session, user):
        client = TestClient(app)
        page = client.get("/dashboard")
        data = client.get("/dashboard/data").json()

    assert data["affiliate_count"] == 1
    assert data["customer_count"] == 1
    assert data["sale_count"] == 2
    assert Decimal(data["revenue"]) == Decimal("1500")
    assert Decimal(data["attributed_revenue"]) == Decimal("1200")
    assert Decimal(data["total_commission"]) == Decimal("120")
    assert "R$ 1.500,00" in page.text
    assert "R$ 120,00" in page.text


def test_dashboard_gives_503_when_customer_count_fails(monkeypatch):
    session = _make_db()
    user = User.create_user("operador", "password", role="user")
    session.add(user)
    session.commit()

    def broken(_db, _model):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(crud, "count_rows", broken)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.get("/dashboard/data")

    assert resp.status_code == 503
    assert "Tente novamente" in resp.json()["detail"]
