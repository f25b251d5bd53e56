import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from cart_service.app.db.database import Settings
from cart_service.app.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(db_name="cart_service_test", collection="carts", cors_origins=["*"])


@pytest.fixture
def mongo_client() -> AsyncMongoMockClient:
    return AsyncMongoMockClient()


@pytest.fixture
def app(settings, mongo_client):
    return create_app(settings, client=mongo_client)


@pytest.fixture
def test_client(app):
    # Контекстный менеджер запускает lifespan (индекс по email)
    with TestClient(app) as client:
        yield client
