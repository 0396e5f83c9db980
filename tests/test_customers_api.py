"""Tests for the customers REST API."""
from sqlalchemy.exc import OperationalError


def test_create_customer_defaults_active_with_generated_id(client, customer_payload):
    r = client.post(
        "/api/clientes",
        json=customer_payload(cidade="São Paulo", estado="SP", cep="01234567", dataNascimento="1990-05-15"),
    )
    assert r.status_code == 201
    body = r.json
    assert body["success"] is True
    assert body["message"] == "Cliente criado com sucesso"
    assert isinstance(body["data"]["id"], int)
    assert body["data"]["ativo"] is True
    assert body["data"]["dataNascimento"] == "1990-05-15"
    assert body["data"]["created_at"]


def test_create_duplicate_email_rejected_first_unaffected(client, create, customer_payload):
    first = create(nome="Maria Santos", email="maria@email.com")

    r = client.post("/api/clientes", json=customer_payload(nome="Outra Maria", email="maria@email.com"))
    assert r.status_code == 400
    assert r.json["success"] is False
    assert r.json["message"] == "Email já cadastrado"

    r = client.get(f"/api/clientes/{first['id']}")
    assert r.json["data"]["nome"] == "Maria Santos"
    assert client.get("/api/clientes/estatisticas").json["data"]["total"] == 1


def test_duplicate_email_checked_against_inactive_customers(client, create, customer_payload):
    c = create(email="inativo@email.com")
    client.delete(f"/api/clientes/{c['id']}")

    r = client.post("/api/clientes", json=customer_payload(email="inativo@email.com"))
    assert r.status_code == 400
    assert r.json["message"] == "Email já cadastrado"


def test_create_unique_constraint_maps_to_duplicate_email(client, create, customer_payload, monkeypatch):
    from app.registry.modules.customers import api

    create(email="maria@email.com")
    monkeypatch.setattr(api, "get_customer_by_email", lambda s, email: None)

    r = client.post("/api/clientes", json=customer_payload(nome="Outra Maria", email="maria@email.com"))
    assert r.status_code == 400
    assert r.json == {"success": False, "message": "Email já cadastrado"}
    assert client.get("/api/clientes/estatisticas").json["data"]["total"] == 1


def test_update_unique_constraint_maps_to_duplicate_email(client, create, monkeypatch):
    from app.registry.modules.customers import api

    create(email="a@email.com")
    b = create(nome="Beatriz", email="b@email.com")
    monkeypatch.setattr(api, "get_customer_by_email", lambda s, email: None)

    r = client.put(f"/api/clientes/{b['id']}", json={"email": "a@email.com"})
    assert r.status_code == 400
    assert r.json["message"] == "Email já cadastrado"
    assert client.get(f"/api/clientes/{b['id']}").json["data"]["email"] == "b@email.com"


def test_create_middleware_requires_core_fields(client):
    r = client.post("/api/clientes", json={"nome": "Ana", "email": "ana@email.com"})
    assert r.status_code == 400
    assert r.json["message"] == "Nome, email e telefone são obrigatórios"

    r = client.post("/api/clientes", data="not json", content_type="text/plain")
    assert r.status_code == 400
    assert r.json["message"] == "Nome, email e telefone são obrigatórios"


def test_create_middleware_rejects_bad_email_syntax(client, customer_payload):
    r = client.post("/api/clientes", json=customer_payload(email="sem-arroba.com"))
    assert r.status_code == 400
    assert r.json["message"] == "Formato de email inválido"
    assert "errors" not in r.json


def test_create_field_validation_errors(client, customer_payload):
    r = client.post(
        "/api/clientes",
        json=customer_payload(nome="A", telefone="123", estado="SPX", cep="123"),
    )
    assert r.status_code == 400
    assert r.json["message"] == "Dados inválidos"
    errors = {e["field"]: e["message"] for e in r.json["errors"]}
    assert errors == {
        "nome": "O nome deve ter entre 2 e 100 caracteres",
        "telefone": "O telefone deve ter entre 10 e 20 caracteres",
        "estado": "O estado deve ter exatamente 2 caracteres",
        "cep": "O CEP deve ter entre 8 e 10 caracteres",
    }
    assert client.get("/api/clientes/estatisticas").json["data"]["total"] == 0


def test_create_rejects_invalid_birth_date(client, customer_payload):
    r = client.post("/api/clientes", json=customer_payload(dataNascimento="1990-13-45"))
    assert r.status_code == 400
    assert r.json["errors"] == [
        {"field": "dataNascimento", "message": "Data de nascimento deve ser uma data válida"}
    ]


def test_list_pagination_metadata(client, create):
    create(nome="Ana Costa", email="ana@email.com")
    create(nome="Bruno Lima", email="bruno@email.com")

    r = client.get("/api/clientes?page=2&limit=1")
    assert r.status_code == 200
    data = r.json["data"]
    assert data["pagination"] == {"currentPage": 2, "totalPages": 2, "totalItems": 2, "itemsPerPage": 1}
    assert len(data["clientes"]) == 1
    assert data["clientes"][0]["nome"] == "Bruno Lima"


def test_list_defaults_and_ordering(client, create):
    create(nome="Carlos", email="carlos@email.com")
    create(nome="Ana", email="ana@email.com")

    r = client.get("/api/clientes")
    data = r.json["data"]
    assert data["pagination"]["currentPage"] == 1
    assert data["pagination"]["itemsPerPage"] == 10
    assert [c["nome"] for c in data["clientes"]] == ["Ana", "Carlos"]


def test_list_garbage_paging_args_fall_back_to_defaults(client, create):
    create()
    r = client.get("/api/clientes?page=abc&limit=-5")
    assert r.json["data"]["pagination"]["currentPage"] == 1
    assert r.json["data"]["pagination"]["itemsPerPage"] == 10


def test_list_empty_table(client):
    r = client.get("/api/clientes")
    assert r.json["data"]["clientes"] == []
    assert r.json["data"]["pagination"]["totalPages"] == 0
    assert r.json["data"]["pagination"]["totalItems"] == 0


def test_list_filters_by_name_and_status(client, create):
    create(nome="Maria Santos", email="maria@email.com")
    create(nome="Mariana Alves", email="mariana@email.com")
    pedro = create(nome="Pedro Oliveira", email="pedro@email.com")
    mariana = client.get("/api/clientes?nome=mariana").json["data"]["clientes"][0]
    client.delete(f"/api/clientes/{mariana['id']}")

    names = [c["nome"] for c in client.get("/api/clientes?nome=MARIA").json["data"]["clientes"]]
    assert names == ["Maria Santos", "Mariana Alves"]

    names = [c["nome"] for c in client.get("/api/clientes?nome=maria&ativo=true").json["data"]["clientes"]]
    assert names == ["Maria Santos"]

    inactive = client.get("/api/clientes?ativo=false").json["data"]["clientes"]
    assert [c["id"] for c in inactive] == [mariana["id"]]

    everyone = client.get("/api/clientes?ativo=").json["data"]["pagination"]["totalItems"]
    assert everyone == 3
    assert pedro["ativo"] is True


def test_name_filter_treats_wildcards_literally(client, create):
    create(nome="Ana Costa", email="ana@email.com")
    r = client.get("/api/clientes?nome=%25")
    assert r.json["data"]["clientes"] == []


def test_get_customer(client, create):
    c = create()
    r = client.get(f"/api/clientes/{c['id']}")
    assert r.status_code == 200
    assert r.json["data"]["email"] == "joao.silva@email.com"


def test_missing_id_is_not_found_for_get_update_delete(client):
    for method in ("get", "put", "delete"):
        r = getattr(client, method)("/api/clientes/999", json={"nome": "Qualquer"})
        assert r.status_code == 404, method
        assert r.json == {"success": False, "message": "Cliente não encontrado"}

    r = client.patch("/api/clientes/999/restaurar")
    assert r.status_code == 404


def test_id_beyond_integer_range_is_not_found(client):
    huge = "99999999999999999999"
    for method in ("get", "put", "delete"):
        r = getattr(client, method)(f"/api/clientes/{huge}", json={"nome": "Qualquer"})
        assert r.status_code == 404, method
        assert r.json["message"] == "Cliente não encontrado"

    assert client.patch(f"/api/clientes/{huge}/restaurar").status_code == 404


def test_list_huge_page_returns_empty_page(client, create):
    create()
    r = client.get("/api/clientes?page=99999999999999999999")
    assert r.status_code == 200
    assert r.json["data"]["clientes"] == []
    assert r.json["data"]["pagination"]["totalItems"] == 1


def test_update_only_name_leaves_other_fields(client, create):
    c = create()
    r = client.put(f"/api/clientes/{c['id']}", json={"nome": "João da Silva"})
    assert r.status_code == 200
    assert r.json["message"] == "Cliente atualizado com sucesso"
    data = r.json["data"]
    assert data["nome"] == "João da Silva"
    assert data["email"] == c["email"]
    assert data["telefone"] == c["telefone"]
    assert data["id"] == c["id"]


def test_update_ignores_id_and_timestamps(client, create):
    c = create()
    r = client.put(f"/api/clientes/{c['id']}", json={"id": 12345, "created_at": "2000-01-01T00:00:00"})
    assert r.status_code == 200
    assert r.json["data"]["id"] == c["id"]
    assert r.json["data"]["created_at"] == c["created_at"]


def test_update_email_conflict_with_other_customer(client, create):
    create(email="a@email.com")
    b = create(nome="Beatriz", email="b@email.com")

    r = client.put(f"/api/clientes/{b['id']}", json={"email": "a@email.com"})
    assert r.status_code == 400
    assert r.json["message"] == "Email já cadastrado"

    # Re-sending its own email is not a conflict.
    r = client.put(f"/api/clientes/{b['id']}", json={"email": "b@email.com", "cidade": "Recife"})
    assert r.status_code == 200
    assert r.json["data"]["cidade"] == "Recife"


def test_update_validation_errors(client, create):
    c = create()
    r = client.put(f"/api/clientes/{c['id']}", json={"email": "invalido", "telefone": ""})
    assert r.status_code == 400
    errors = {e["field"]: e["message"] for e in r.json["errors"]}
    assert errors == {
        "email": "Email deve ter um formato válido",
        "telefone": "O telefone é obrigatório",
    }
    assert client.get(f"/api/clientes/{c['id']}").json["data"]["email"] == c["email"]


def test_update_blank_optional_field_clears_it(client, create):
    c = create(cidade="Campinas")
    r = client.put(f"/api/clientes/{c['id']}", json={"cidade": "  "})
    assert r.status_code == 200
    assert r.json["data"]["cidade"] is None


def test_soft_delete_and_restore(client, create):
    c = create()

    r = client.delete(f"/api/clientes/{c['id']}")
    assert r.status_code == 200
    assert r.json == {"success": True, "message": "Cliente excluído com sucesso"}

    r = client.get(f"/api/clientes/{c['id']}")
    assert r.status_code == 200
    assert r.json["data"]["ativo"] is False

    r = client.patch(f"/api/clientes/{c['id']}/restaurar")
    assert r.status_code == 200
    assert r.json["message"] == "Cliente restaurado com sucesso"
    assert r.json["data"]["ativo"] is True


def test_delete_and_restore_are_idempotent(client, create):
    c = create()
    assert client.delete(f"/api/clientes/{c['id']}").status_code == 200
    assert client.delete(f"/api/clientes/{c['id']}").status_code == 200
    assert client.get(f"/api/clientes/{c['id']}").json["data"]["ativo"] is False

    assert client.patch(f"/api/clientes/{c['id']}/restaurar").status_code == 200
    r = client.patch(f"/api/clientes/{c['id']}/restaurar")
    assert r.status_code == 200
    assert r.json["data"]["ativo"] is True


def test_stats_counts_active_and_inactive(client, create):
    create(email="ativo@email.com")
    inactive = create(nome="Carlos Ferreira", email="inativo@email.com")
    client.delete(f"/api/clientes/{inactive['id']}")

    r = client.get("/api/clientes/estatisticas")
    assert r.status_code == 200
    assert r.json["data"] == {"total": 2, "ativos": 1, "inativos": 1}


def test_stats_route_not_swallowed_by_id_route(client):
    r = client.get("/api/clientes/estatisticas")
    assert r.status_code == 200
    assert set(r.json["data"]) == {"total", "ativos", "inativos"}


def test_storage_failure_returns_500_without_detail(client, monkeypatch):
    from app.registry.modules.customers import api

    def boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(api, "find_customers", boom)
    r = client.get("/api/clientes")
    assert r.status_code == 500
    assert r.json == {"success": False, "message": "Erro interno do servidor"}


def test_storage_failure_detail_in_development(app, client, monkeypatch):
    from app.registry.modules.customers import api

    def boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    app.config["ENV"] = "development"
    monkeypatch.setattr(api, "customer_stats", boom)
    r = client.get("/api/clientes/estatisticas")
    assert r.status_code == 500
    assert "database is locked" in r.json["error"]


def test_custom_api_prefix(tmp_path, monkeypatch):
    from app.registry import create_app

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prefix.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("API_PREFIX", "v1/")
    client = create_app().test_client()

    assert client.get("/v1/clientes").status_code == 200
    assert client.get("/api/clientes").status_code == 404
