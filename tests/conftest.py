import os

# przed importem easybuy: settings czytaja env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOCK_BACKEND"] = "local"
os.environ["BCRYPT_ROUNDS"] = "4"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from easybuy.data.database import get_db, init_db, make_engine
from easybuy.domain.schemas import ProductRecord
from easybuy.main import create_app
from easybuy.services.account_service import AccountService
from easybuy.services.cart_service import CartService
from easybuy.services.catalog import StaticCatalog
from easybuy.services.credentials import CredentialStore
from easybuy.services.lock_service import LocalLockService
from easybuy.services.order_service import OrderService
from easybuy.services.review_service import ReviewService
from easybuy.services.token_service import TokenService

PRODUCTS = {
    "A": ProductRecord(name="Keyboard", image_url="https://img.example.com/a.jpg", price=Decimal("100")),
    "B": ProductRecord(name="Mouse", image_url="https://img.example.com/b.jpg", price=Decimal("49.50")),
    "C": ProductRecord(name="Monitor", image_url=None, price=Decimal("899.00")),
}


@pytest.fixture()
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'easybuy.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def catalog():
    return StaticCatalog(PRODUCTS)


@pytest.fixture()
def lock_service():
    return LocalLockService(wait_seconds=1)


@pytest.fixture()
def credentials():
    return CredentialStore(rounds=4)


@pytest.fixture()
def tokens(db, lock_service):
    return TokenService(db, lock_service, access_secret="test-access", refresh_secret="test-refresh")


@pytest.fixture()
def accounts(db, credentials, tokens):
    return AccountService(db, credentials, tokens)


@pytest.fixture()
def user(accounts):
    return accounts.register("alice@example.com", "s3cret-pass")


@pytest.fixture()
def carts(db, catalog, lock_service):
    return CartService(db, catalog, lock_service)


@pytest.fixture()
def orders(db, catalog, lock_service):
    return OrderService(db, catalog, lock_service)


@pytest.fixture()
def reviews(db, lock_service):
    return ReviewService(db, lock_service)


@pytest.fixture()
def client(session_factory, catalog, lock_service, credentials):
    app = create_app(
        catalog=catalog,
        lock_service=lock_service,
        credentials=credentials,
        create_tables=False,
    )

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
