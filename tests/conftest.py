import os

# precisa vir antes de qualquer import do pacote app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REGISTRY_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.data.database import Base, SessionLocal, engine
from app.main import app
from app.services.product_service import ProductService


@pytest.fixture(autouse=True)
def reset_db():
    """Banco limpo para cada teste."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def test_client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_product(db):
    """Cria produto pelo ProductService (base + satelite)."""

    def _make(preco="10.00", nome="Bolinha", tipo="BRINQUEDO", descricao=None):
        return ProductService(db).create_product(
            {"nome": nome, "preco": preco, "tipo": tipo, "descricao": descricao}
        )

    return _make
