from contextlib import contextmanager
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import crud
from app.main import app
from app.database import Base, get_session
from app.auth import User
from app.models import Affiliate, Customer, Sale
from app.routers.auth import get_current_user
from app.schemas import SaleCreate


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


def _query(resp) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(urlparse(resp.headers["location"]).query).items()}


# --- Affiliates ---------------------------------------------------------------

def test_create_affiliate_with_default_rate():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post("/affiliates/new", data={"whatsapp": " 5511977776666 "}, follow_redirects=False)

    assert resp.status_code == 303
    assert _query(resp)["success"] == "Afiliado salvo com sucesso!"
    affiliate = session.execute(select(Affiliate)).scalar_one()
    assert affiliate.whatsapp == "5511977776666"
    assert affiliate.commission_percent == Decimal("5")
    assert affiliate.link is None


def test_create_affiliate_rejects_negative_rate_and_blank_whatsapp():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        negative = client.post(
            "/affiliates/new", data={"whatsapp": "5511", "commission_percent": "-1"}, follow_redirects=False
        )
        blank = client.post("/affiliates/new", data={"whatsapp": "   "}, follow_redirects=False)

    assert "commission_percent" in _query(negative)["error"]
    assert "whatsapp" in _query(blank)["error"]
    assert crud.count_rows(session, Affiliate) == 0


def test_create_affiliate_rejects_huge_rate():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/affiliates/new", data={"whatsapp": "5511", "commission_percent": "1e30"}, follow_redirects=False
        )

    assert resp.status_code == 303
    assert "commission_percent" in _query(resp)["error"]
    assert crud.count_rows(session, Affiliate) == 0


def test_edit_and_delete_affiliate():
    session = _make_db()
    user = _user(session)
    affiliate = Affiliate(whatsapp="5511900000000", commission_percent=Decimal("5"))
    session.add(affiliate)
    session.commit()

    with _override_dependencies(session, user):
        client = TestClient(app)
        edit_page = client.get(f"/affiliates/?edit={affiliate.id}")
        assert edit_page.status_code == 200
        assert "Editar afiliado" in edit_page.text

        resp = client.post(
            f"/affiliates/{affiliate.id}/edit",
            data={"whatsapp": "5511900000001", "commission_percent": "7.5", "link": "https://mira.example/r/ana"},
            follow_redirects=False,
        )
        assert resp.status_code == 303
        data = client.get(f"/affiliates/{affiliate.id}.json").json()
        assert data["whatsapp"] == "5511900000001"
        assert Decimal(data["commission_percent"]) == Decimal("7.5")

        resp = client.post(f"/affiliates/{affiliate.id}/delete", follow_redirects=False)
        assert resp.status_code == 303
        assert client.post(f"/affiliates/{affiliate.id}/delete", follow_redirects=False).status_code == 404

    assert crud.count_rows(session, Affiliate) == 0


def test_affiliate_list_is_paginated_newest_first():
    session = _make_db()
    user = _user(session)
    for index in range(12):
        session.add(Affiliate(whatsapp=f"55119000000{index:02d}", commission_percent=Decimal("5")))
    session.commit()

    first = crud.list_affiliates(session, 1)
    second = crud.list_affiliates(session, 2)
    assert len(first.items) == crud.PAGE_SIZE
    assert len(second.items) == 2
    assert first.total == 12
    assert first.total_pages == 2
    assert first.has_next and not first.has_previous
    assert second.has_previous and not second.has_next
    assert {a.id for a in first.items}.isdisjoint({a.id for a in second.items})

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.get("/affiliates/?page=2")
    assert resp.status_code == 200
    assert "Página 2 de 2" in resp.text


# --- Customers ----------------------------------------------------------------

def test_create_customer_normalizes_cpf():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/customers/new",
            data={"nome": "Maria", "telefone": "5511955554444", "email": "maria@example.com", "cpf": "123.456.789-09"},
            follow_redirects=False,
        )

    assert resp.status_code == 303
    customer = session.execute(select(Customer)).scalar_one()
    assert customer.cpf == "12345678909"
    assert customer.email == "maria@example.com"


def test_create_customer_validation_errors():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        bad_cpf = client.post("/customers/new", data={"telefone": "55119", "cpf": "123"}, follow_redirects=False)
        bad_email = client.post("/customers/new", data={"telefone": "55119", "email": "nope"}, follow_redirects=False)
        no_phone = client.post("/customers/new", data={"nome": "Sem telefone"}, follow_redirects=False)

    assert "CPF must have 11 digits" in _query(bad_cpf)["error"]
    assert "Email" in _query(bad_email)["error"]
    assert "telefone" in _query(no_phone)["error"]
    assert crud.count_rows(session, Customer) == 0


def test_update_customer_touches_updated_at():
    session = _make_db()
    user = _user(session)
    customer = Customer(nome="João", telefone="5511944443333")
    session.add(customer)
    session.commit()
    before = customer.updated_at

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            f"/customers/{customer.id}/edit",
            data={"nome": "João Silva", "telefone": "5511944443333"},
            follow_redirects=False,
        )

    assert resp.status_code == 303
    session.refresh(customer)
    assert customer.nome == "João Silva"
    assert customer.updated_at >= before


def test_customer_history_json():
    session = _make_db()
    user = _user(session)
    customer = Customer(nome="Paula", telefone="5511922221111")
    affiliate = Affiliate(id="aff-9", whatsapp="5511911112222", commission_percent=Decimal("10"))
    session.add_all([customer, affiliate])
    session.flush()
    session.add_all(
        [
            Sale(code="P1", product_name="Cota", total_amount=Decimal("50.00"), customer_id=customer.id,
                 affiliate_id="aff-9"),
            Sale(code="P2", product_name="Cota", total_amount=Decimal("25.00"), customer_id=customer.id,
                 status="0"),
            Sale(code="X1", product_name="Cota", total_amount=Decimal("999.00")),
        ]
    )
    session.commit()

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.get(f"/customers/{customer.id}/history.json")
        page = client.get(f"/customers/{customer.id}/history")
        missing = client.get("/customers/nope/history.json")

    assert resp.status_code == 200
    data = resp.json()
    assert data["customer"]["nome"] == "Paula"
    assert data["summary"]["count"] == 2
    assert Decimal(data["summary"]["total_spent"]) == Decimal("75")
    assert Decimal(data["summary"]["total_commission"]) == Decimal("5")
    codes = {row["code"]: row for row in data["transactions"]}
    assert codes["P1"]["affiliate"]["id"] == "aff-9"
    assert codes["P2"]["affiliate"] is None
    assert codes["P2"]["status_label"] == "Pendente"
    assert page.status_code == 200
    assert "Paula" in page.text
    assert missing.status_code == 404


# --- Sales --------------------------------------------------------------------

def test_create_sale_defaults_status_and_stamps_date():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/sales/new",
            data={"code": "ORD-1", "product_name": "Cota x10", "total_amount": "19.90", "status": "",
                  "affiliate_id": ""},
            follow_redirects=False,
        )

    assert resp.status_code == 303
    sale = session.execute(select(Sale)).scalar_one()
    assert sale.status == "1"
    assert sale.total_amount == Decimal("19.90")
    assert sale.affiliate_id is None
    assert sale.date_created is not None


def test_create_sale_rejects_negative_amount():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            "/sales/new",
            data={"code": "ORD-2", "product_name": "Cota", "total_amount": "-5"},
            follow_redirects=False,
        )

    assert "total_amount" in _query(resp)["error"]
    assert crud.count_rows(session, Sale) == 0


def test_create_sale_rejects_amount_wider_than_column():
    session = _make_db()
    user = _user(session)

    with _override_dependencies(session, user):
        client = TestClient(app)
        huge = client.post(
            "/sales/new",
            data={"code": "ORD-3", "product_name": "Cota", "total_amount": "1e30"},
            follow_redirects=False,
        )
        too_many_digits = client.post(
            "/sales/new",
            data={"code": "ORD-4", "product_name": "Cota", "total_amount": "12345678901234"},
            follow_redirects=False,
        )

    assert huge.status_code == 303
    assert "total_amount" in _query(huge)["error"]
    assert too_many_digits.status_code == 303
    assert "too large" in _query(too_many_digits)["error"]
    assert crud.count_rows(session, Sale) == 0


def test_edit_sale_keeps_creation_date_and_lists():
    session = _make_db()
    user = _user(session)
    affiliate = Affiliate(id="aff-3", whatsapp="5511933334444", commission_percent=Decimal("5"))
    session.add(affiliate)
    session.commit()
    sale = crud.create_sale(
        session,
        SaleCreate(code="ORD-3", product_name="Cota", total_amount=Decimal("10"), status="0"),
    )
    created = sale.date_created

    with _override_dependencies(session, user):
        client = TestClient(app)
        resp = client.post(
            f"/sales/{sale.id}/edit",
            data={"code": "ORD-3", "product_name": "Cota", "total_amount": "10", "status": "1",
                  "affiliate_id": "aff-3"},
            follow_redirects=False,
        )
        listing = client.get("/sales/")

    assert resp.status_code == 303
    session.refresh(sale)
    assert sale.status == "1"
    assert sale.affiliate_id == "aff-3"
    assert sale.date_created == created
    assert listing.status_code == 200
    assert "ORD-3" in listing.text
    assert "Pago" in listing.text
