import pytest

from app.registry import create_app
from app.registry.models import Base


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("API_PREFIX", "AUTO_CREATE_TABLES", "LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.config["TESTING"] = True

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def customer_payload():
    """Factory for a valid create payload; keyword overrides replace fields."""

    def _payload(**overrides):
        payload = {
            "nome": "João Silva",
            "email": "joao.silva@email.com",
            "telefone": "11999999999",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture()
def create(client, customer_payload):
    """POST a customer through the API and return the created record."""

    def _create(**overrides):
        r = client.post("/api/clientes", json=customer_payload(**overrides))
        assert r.status_code == 201, r.json
        return r.json["data"]

    return _create
