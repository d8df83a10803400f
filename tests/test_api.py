"""API-level tests for the catalog, costing, projects and dashboard."""
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from main import app
from modules.products.service import PRODUCT_CSV_COLUMNS

client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_db():
    """Reset database before each test by re-initializing."""
    from core.database import Base, engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def create_product(name, product_type="raw_material", cost_price=0.0, components=None, **extra):
    payload = {
        "name": name,
        "product_type": product_type,
        "cost_price": cost_price,
        "components": components or [],
    }
    payload.update(extra)
    resp = client.post("/products", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_drawer():
    pine = create_product("Tábua de Pinus", cost_price=10.0, unit="m")
    screw = create_product("Parafuso", cost_price=0.5)
    drawer = create_product(
        "Gaveta",
        product_type="subassembly",
        components=[
            {"component_id": pine["id"], "quantity": 2},
            {"component_id": screw["id"], "quantity": 4},
        ],
    )
    return pine, screw, drawer


def test_health():
    assert client.get("/health").json() == {"status": "ok"}


def test_product_read_includes_rolled_up_cost():
    pine, screw, drawer = create_drawer()
    cabinet = create_product(
        "Armário",
        product_type="finished_good",
        components=[{"component_id": drawer["id"], "quantity": 1}, {"component_id": pine["id"], "quantity": 1}],
    )

    assert drawer["unit_cost"] == pytest.approx(22.0)
    assert cabinet["unit_cost"] == pytest.approx(32.0)
    assert [c["component_name"] for c in drawer["components"]] == ["Tábua de Pinus", "Parafuso"]

    listed = client.get("/products").json()
    assert [p["name"] for p in listed] == ["Tábua de Pinus", "Parafuso", "Gaveta", "Armário"]
    assert listed[3]["unit_cost"] == pytest.approx(32.0)


def test_sale_price_from_margin():
    pine, screw, _ = create_drawer()
    drawer = create_product(
        "Gaveta Grande",
        product_type="subassembly",
        components=[{"component_id": pine["id"], "quantity": 2}, {"component_id": screw["id"], "quantity": 4}],
        profit_margin=50,
    )
    assert drawer["sale_price"] == pytest.approx(44.0)

    explicit = create_product("Cola", cost_price=8.0, sale_price=9.0, profit_margin=50)
    assert explicit["sale_price"] == pytest.approx(9.0)


def test_raw_material_cannot_have_components():
    pine = create_product("Pinus", cost_price=10.0)
    resp = client.post(
        "/products",
        json={
            "name": "Compensado",
            "product_type": "raw_material",
            "components": [{"component_id": pine["id"], "quantity": 1}],
        },
    )
    assert resp.status_code == 422
    assert resp.json()["codigo"] == "validation_error"


def test_unknown_component_is_not_found():
    resp = client.post(
        "/products",
        json={"name": "Mesa", "product_type": "finished_good", "components": [{"component_id": 999, "quantity": 1}]},
    )
    assert resp.status_code == 404
    assert resp.json()["codigo"] == "not_found"


def test_negative_quantity_is_rejected():
    pine = create_product("Pinus", cost_price=10.0)
    resp = client.post(
        "/products",
        json={"name": "Mesa", "product_type": "finished_good", "components": [{"component_id": pine["id"], "quantity": -1}]},
    )
    assert resp.status_code == 422


def test_update_that_creates_cycle_is_refused():
    pine = create_product("Pinus", cost_price=10.0)
    part = create_product("Lateral", product_type="subassembly", components=[{"component_id": pine["id"], "quantity": 1}])
    box = create_product("Caixa", product_type="finished_good", components=[{"component_id": part["id"], "quantity": 2}])

    resp = client.put(
        f"/products/{part['id']}",
        json={"name": "Lateral", "product_type": "subassembly", "components": [{"component_id": box["id"], "quantity": 1}]},
    )
    assert resp.status_code == 422
    assert "circular" in resp.json()["mensagem"]

    unchanged = client.get(f"/products/{part['id']}").json()
    assert [c["component_id"] for c in unchanged["components"]] == [pine["id"]]
    assert unchanged["unit_cost"] == pytest.approx(10.0)


def test_self_reference_is_refused():
    part = create_product("Lateral", product_type="subassembly")
    resp = client.put(
        f"/products/{part['id']}",
        json={"name": "Lateral", "product_type": "subassembly", "components": [{"component_id": part["id"], "quantity": 1}]},
    )
    assert resp.status_code == 422


def test_update_replaces_components():
    pine, screw, drawer = create_drawer()
    resp = client.put(
        f"/products/{drawer['id']}",
        json={
            "name": "Gaveta",
            "product_type": "subassembly",
            "components": [{"component_id": pine["id"], "quantity": 3}],
        },
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["unit_cost"] == pytest.approx(30.0)
    assert len(resp.json()["components"]) == 1


def test_delete_product_in_use_is_refused():
    pine, _, drawer = create_drawer()

    resp = client.delete(f"/products/{pine['id']}")
    assert resp.status_code == 422
    assert "Gaveta" in resp.json()["mensagem"]

    assert client.delete(f"/products/{drawer['id']}").status_code == 204
    assert client.get(f"/products/{drawer['id']}").status_code == 404
    assert client.delete(f"/products/{pine['id']}").status_code == 204


def test_cost_breakdown_endpoint():
    pine, screw, drawer = create_drawer()

    resp = client.get(f"/costing/products/{drawer['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["unit_cost"] == pytest.approx(22.0)
    assert data["cost_complete"] is True
    assert [child["name"] for child in data["tree"]["children"]] == ["Tábua de Pinus", "Parafuso"]
    assert {r["name"] for r in data["requirements"]} == {"Tábua de Pinus", "Parafuso"}

    costs = client.get("/costing/products").json()
    assert {c["name"]: c["unit_cost"] for c in costs}["Gaveta"] == pytest.approx(22.0)

    assert client.get("/costing/products/999").status_code == 404


def test_project_costing_and_excel():
    _, _, drawer = create_drawer()
    customer = client.post("/clients", json={"name": "Marcenaria Silva", "state": "sp"}).json()

    resp = client.post(
        "/projects",
        json={
            "title": "Cômoda",
            "client_id": customer["id"],
            "labor_cost": 100,
            "lines": [{"product_id": drawer["id"], "quantity": 4, "unit_price": 60}],
        },
    )
    assert resp.status_code == 200, resp.text
    project = resp.json()
    assert project["client_name"] == "Marcenaria Silva"
    assert project["budget"] == pytest.approx(240.0)

    costing = client.get(f"/costing/projects/{project['id']}").json()
    assert costing["summary"]["materials_cost"] == pytest.approx(88.0)
    assert costing["summary"]["total_cost"] == pytest.approx(188.0)
    assert costing["summary"]["gross_margin"] == pytest.approx(52.0)

    excel = client.get(f"/costing/projects/{project['id']}/excel")
    assert excel.status_code == 200
    assert excel.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


def test_project_validation():
    assert client.post("/projects", json={"title": "Vazio", "lines": []}).status_code == 422
    resp = client.post("/projects", json={"title": "X", "lines": [{"product_id": 999, "quantity": 1}]})
    assert resp.status_code == 404


def test_project_status_update():
    pine = create_product("Pinus", cost_price=10.0)
    project = client.post(
        "/projects", json={"title": "Banco", "lines": [{"product_id": pine["id"], "quantity": 1, "unit_price": 20}]}
    ).json()
    assert project["status"] == "quote"

    resp = client.patch(f"/projects/{project['id']}/status", json={"status": "in_production"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "in_production"


def test_csv_import_and_export():
    csv_text = "\ufeffnome;preco_custo;estoque;tipo\nTábua;12,50;3;material_bruto\n;1;1;\nCola;8;;raw_material\n"

    resp = client.post("/products/import", content=csv_text.encode("utf-8"), headers={"Content-Type": "text/csv"})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"imported": 2, "skipped_lines": [3]}

    products = {p["name"]: p for p in client.get("/products").json()}
    assert products["Tábua"]["cost_price"] == pytest.approx(12.5)
    assert products["Tábua"]["current_stock"] == 3
    assert products["Tábua"]["product_type"] == "raw_material"
    assert products["Tábua"]["category"] == "Geral"
    assert products["Cola"]["current_stock"] == 0

    export = client.get("/products/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    lines = export.text.splitlines()
    assert lines[0] == ",".join(PRODUCT_CSV_COLUMNS)
    assert len(lines) == 3


def test_csv_import_rejects_empty_file():
    resp = client.post("/products/import", content=b"nome,preco_custo\n", headers={"Content-Type": "text/csv"})
    assert resp.status_code == 422


def test_sales_purchases_transactions_and_dashboard():
    pine, _, drawer = create_drawer()
    customer = client.post("/clients", json={"name": "Ana"}).json()

    sale = client.post(
        "/sales",
        json={
            "date": "2024-03-10",
            "client_id": customer["id"],
            "status": "pending",
            "payment_method": "pix",
            "items": [{"product_id": drawer["id"], "quantity": 2, "unit_price": 75}],
        },
    )
    assert sale.status_code == 200, sale.text
    assert sale.json()["total"] == pytest.approx(150.0)
    assert sale.json()["client_name"] == "Ana"

    purchase = client.post(
        "/purchases",
        json={
            "date": "2024-03-11",
            "supplier_name": "Madeireira Sul",
            "items": [{"product_id": pine["id"], "quantity": 10, "unit_cost": 9.5}],
        },
    )
    assert purchase.status_code == 200, purchase.text
    assert purchase.json()["total"] == pytest.approx(95.0)

    transaction = client.post(
        "/transactions", json={"type": "income", "category": "Vendas", "amount": 200, "date": "2024-03-01"}
    )
    assert transaction.status_code == 200, transaction.text
    assert len(client.get("/transactions").json()) == 1

    assert client.post("/sales", json={"date": "2024-03-10", "items": []}).status_code == 422

    stats = client.get("/dashboard").json()
    assert stats["total_clients"] == 1
    assert stats["pending_payments"] == pytest.approx(150.0)
    # every product starts at zero stock against a zero minimum
    assert stats["low_stock_items"] == 3
    assert [a["type"] for a in stats["recent_activity"]] == ["purchase", "sale"]


def test_client_not_found():
    resp = client.get("/clients/999")
    assert resp.status_code == 404
    assert resp.json() == {"mensagem": "Cliente não encontrado", "codigo": "not_found"}


def test_invalid_client_document():
    assert client.post("/clients", json={"name": "Ana", "document": "123"}).status_code == 422
    ok = client.post("/clients", json={"name": "Ana", "document": "123.456.789-09"})
    assert ok.json()["document"] == "12345678909"


def test_delete_product_used_by_project_sale_or_purchase_is_refused():
    pine = create_product("Pinus", cost_price=10.0)
    glue = create_product("Cola", cost_price=8.0)
    screw = create_product("Parafuso", cost_price=0.5)
    client.post("/projects", json={"title": "Banco", "lines": [{"product_id": pine["id"], "quantity": 2}]})
    client.post(
        "/sales",
        json={
            "date": "2024-03-10",
            "items": [{"product_id": glue["id"], "quantity": 1, "unit_price": 9}],
        },
    )
    client.post(
        "/purchases",
        json={
            "date": "2024-03-10", "supplier_name": "Ferragens",
            "items": [{"product_id": screw["id"], "quantity": 100, "unit_cost": 0.4}],
        },
    )

    for product in (pine, glue, screw):
        resp = client.delete(f"/products/{product['id']}")
        assert resp.status_code == 422
        assert resp.json()["mensagem"].startswith("Produto usado em:")

    assert "1 projeto(s)" in client.delete(f"/products/{pine['id']}").json()["mensagem"]
    assert client.get("/projects").status_code == 200
    assert client.get("/sales").status_code == 200
    assert client.get("/purchases").status_code == 200
    assert client.get("/projects").json()[0]["lines"][0]["product_name"] == "Pinus"


def test_database_rejects_orphan_project_lines():
    from sqlalchemy.exc import IntegrityError

    from core.database import SessionLocal
    from modules.products.models import Product

    pine = create_product("Pinus", cost_price=10.0)
    client.post("/projects", json={"title": "Banco", "lines": [{"product_id": pine["id"], "quantity": 1}]})

    db = SessionLocal()
    try:
        db.delete(db.get(Product, pine["id"]))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()

    assert client.get("/projects").status_code == 200


def test_manual_stock_movements_floor_at_zero():
    pine = create_product("Pinus", cost_price=10.0, current_stock=5)

    resp = client.post(
        "/stock-movements",
        json={"product_id": pine["id"], "movement_type": "in", "quantity": 3, "unit_price": 10, "date": "2024-03-01"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["resulting_stock"] == pytest.approx(8.0)
    assert resp.json()["total_value"] == pytest.approx(30.0)

    resp = client.post("/stock-movements", json={"product_id": pine["id"], "movement_type": "out", "quantity": 20})
    assert resp.json()["resulting_stock"] == 0
    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == 0

    history = client.get("/stock-movements", params={"product_id": pine["id"]}).json()
    assert len(history) == 2
    missing = client.post("/stock-movements", json={"product_id": 999, "movement_type": "in", "quantity": 1})
    assert missing.status_code == 404


def test_project_stock_out_happens_once():
    pine = create_product("Pinus", cost_price=10.0, current_stock=10)
    screw = create_product("Parafuso", cost_price=0.5, current_stock=3)
    project = client.post(
        "/projects",
        json={
            "title": "Banco",
            "lines": [{"product_id": pine["id"], "quantity": 4}, {"product_id": screw["id"], "quantity": 8}],
        },
    ).json()

    resp = client.post(f"/projects/{project['id']}/stock-out")
    assert resp.status_code == 200, resp.text
    movements = resp.json()
    assert [m["reference_type"] for m in movements] == ["project", "project"]
    assert movements[0]["notes"] == f"Saída para projeto #{project['id']}"
    assert movements[0]["project_title"] == "Banco"

    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == pytest.approx(6.0)
    assert client.get(f"/products/{screw['id']}").json()["current_stock"] == 0

    assert client.post(f"/projects/{project['id']}/stock-out").status_code == 422
    assert client.post("/projects/999/stock-out").status_code == 404


def test_sales_and_received_purchases_move_stock():
    pine = create_product("Pinus", cost_price=10.0, current_stock=5)

    client.post(
        "/sales",
        json={
            "date": "2024-03-10",
            "items": [{"product_id": pine["id"], "quantity": 2, "unit_price": 15}],
        },
    )
    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == pytest.approx(3.0)

    purchase = client.post(
        "/purchases",
        json={
            "date": "2024-03-11", "supplier_name": "Madeireira",
            "items": [{"product_id": pine["id"], "quantity": 10, "unit_cost": 9}],
        },
    ).json()
    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == pytest.approx(3.0)

    payload = {
        "date": "2024-03-11",
        "supplier_name": "Madeireira",
        "status": "received",
        "items": [{"product_id": pine["id"], "quantity": 10, "unit_cost": 9}],
    }
    assert client.put(f"/purchases/{purchase['id']}", json=payload).status_code == 200
    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == pytest.approx(13.0)

    # saving an already received purchase again does not count the goods twice
    client.put(f"/purchases/{purchase['id']}", json=payload)
    assert client.get(f"/products/{pine['id']}").json()["current_stock"] == pytest.approx(13.0)

    kinds = [m["reference_type"] for m in client.get("/stock-movements").json()]
    assert sorted(kinds) == ["purchase", "sale"]


def test_supplier_crud_and_purchase_link():
    resp = client.post(
        "/suppliers",
        json={"name": "Madeireira Sul", "document": "12.345.678/0001-90", "phone": "1133334444"},
    )
    assert resp.status_code == 200, resp.text
    supplier = resp.json()
    assert supplier["document"] == "12345678000190"
    assert supplier["active"] is True

    pine = create_product("Pinus", cost_price=10.0)
    purchase = client.post(
        "/purchases",
        json={
            "date": "2024-03-11", "supplier_id": supplier["id"],
            "items": [{"product_id": pine["id"], "quantity": 1, "unit_cost": 9}],
        },
    ).json()
    assert purchase["supplier_id"] == supplier["id"]
    assert purchase["supplier_name"] == "Madeireira Sul"

    updated = client.put(f"/suppliers/{supplier['id']}", json={"name": "Madeireira Sul Ltda", "active": False}).json()
    assert updated["name"] == "Madeireira Sul Ltda"
    assert client.get("/suppliers", params={"active_only": True}).json() == []

    assert client.delete(f"/suppliers/{supplier['id']}").status_code == 204
    assert client.get(f"/suppliers/{supplier['id']}").status_code == 404
    kept = client.get(f"/purchases/{purchase['id']}").json()
    assert kept["supplier_id"] is None
    assert kept["supplier_name"] == "Madeireira Sul"


def test_purchase_needs_a_supplier():
    pine = create_product("Pinus", cost_price=10.0)
    item = [{"product_id": pine["id"], "quantity": 1, "unit_cost": 9}]
    assert client.post("/purchases", json={"date": "2024-03-11", "items": item}).status_code == 422
    assert client.post("/purchases", json={"date": "2024-03-11", "supplier_id": 999, "items": item}).status_code == 404
    assert client.post("/suppliers", json={"name": "X", "document": "123"}).status_code == 422


def test_client_update_and_delete_keeps_projects():
    customer = client.post("/clients", json={"name": "Ana", "city": "Curitiba"}).json()
    pine = create_product("Pinus", cost_price=10.0)
    project = client.post(
        "/projects",
        json={"title": "Mesa", "client_id": customer["id"], "lines": [{"product_id": pine["id"], "quantity": 1}]},
    ).json()

    resp = client.put(f"/clients/{customer['id']}", json={"name": "Ana Souza", "state": "pr", "mobile": "41999990000"})
    assert resp.status_code == 200
    assert resp.json()["state"] == "PR"
    assert resp.json()["city"] is None
    assert client.get(f"/projects/{project['id']}").json()["client_name"] == "Ana Souza"

    assert client.delete(f"/clients/{customer['id']}").status_code == 204
    assert client.get(f"/clients/{customer['id']}").status_code == 404
    orphan = client.get(f"/projects/{project['id']}").json()
    assert orphan["client_id"] is None
    assert orphan["client_name"] is None


def test_client_csv_import_and_export():
    csv_text = (
        "Nome;E-mail;Celular;CPF;CNPJ;Rua;Numero;Cidade;UF;CEP\n"
        "Ana;ana@example.com;41999990000;123.456.789-09;;Rua XV;100;Curitiba;pr;80000-000\n"
        ";sem@nome.com;;;;;;;;\n"
        "Marcenaria Silva;;;;12.345.678/0001-90;;;São Paulo;SP;\n"
        "Documento Ruim;;;123;;;;;;\n"
    )
    resp = client.post("/clients/import", content=csv_text.encode("utf-8"), headers={"Content-Type": "text/csv"})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"imported": 2, "skipped_lines": [3, 5]}

    clients = {c["name"]: c for c in client.get("/clients").json()}
    assert clients["Ana"]["document"] == "12345678909"
    assert clients["Ana"]["state"] == "PR"
    assert clients["Ana"]["street"] == "Rua XV"
    assert clients["Marcenaria Silva"]["document"] == "12345678000190"

    export = client.get("/clients/export")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    lines = export.text.splitlines()
    assert lines[0] == "nome,email,telefone,celular,cpf,cnpj,endereco,numero,bairro,cidade,estado,cep"
    assert lines[1].startswith("Ana,ana@example.com,,41999990000,12345678909,,Rua XV,100,,Curitiba,PR,")
    assert ",12345678000190," in lines[2]


def test_sale_update_and_delete():
    pine = create_product("Pinus", cost_price=10.0)
    sale = client.post(
        "/sales", json={"date": "2024-03-10", "items": [{"product_id": pine["id"], "quantity": 1, "unit_price": 20}]}
    ).json()

    resp = client.put(
        f"/sales/{sale['id']}",
        json={
            "date": "2024-03-12", "status": "completed",
            "items": [{"product_id": pine["id"], "quantity": 3, "unit_price": 20}],
        },
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["total"] == pytest.approx(60.0)
    assert resp.json()["status"] == "completed"
    assert len(resp.json()["items"]) == 1

    assert client.delete(f"/sales/{sale['id']}").status_code == 204
    assert client.get(f"/sales/{sale['id']}").status_code == 404
    assert client.delete(f"/products/{pine['id']}").status_code == 204


def test_purchase_delete():
    pine = create_product("Pinus", cost_price=10.0)
    purchase = client.post(
        "/purchases",
        json={
            "date": "2024-03-11", "supplier_name": "Madeireira",
            "items": [{"product_id": pine["id"], "quantity": 1, "unit_cost": 9}],
        },
    ).json()
    assert client.delete(f"/purchases/{purchase['id']}").status_code == 204
    assert client.get("/purchases").json() == []
    assert client.delete(f"/purchases/{purchase['id']}").status_code == 404


def test_transaction_update_and_delete():
    created = client.post(
        "/transactions", json={"type": "expense", "category": "Energia", "amount": 120, "date": "2024-03-05"}
    ).json()

    resp = client.put(
        f"/transactions/{created['id']}",
        json={"type": "expense", "category": "Energia", "amount": 135.5, "date": "2024-03-05"},
    )
    assert resp.status_code == 200
    assert resp.json()["amount"] == pytest.approx(135.5)
    assert client.put(
        f"/transactions/{created['id']}",
        json={"type": "expense", "category": "Energia", "amount": 1, "date": "2024-03-05", "project_id": 999},
    ).status_code == 404

    assert client.delete(f"/transactions/{created['id']}").status_code == 204
    assert client.get(f"/transactions/{created['id']}").status_code == 404


def test_project_update_and_delete():
    pine = create_product("Pinus", cost_price=10.0)
    screw = create_product("Parafuso", cost_price=0.5)
    project = client.post(
        "/projects", json={"title": "Banco", "lines": [{"product_id": pine["id"], "quantity": 1, "unit_price": 20}]}
    ).json()
    client.post(
        "/transactions",
        json={"type": "income", "category": "Sinal", "amount": 50, "date": "2024-03-01", "project_id": project["id"]},
    )

    resp = client.put(
        f"/projects/{project['id']}",
        json={
            "title": "Banco Grande",
            "status": "approved",
            "lines": [
                {"product_id": pine["id"], "quantity": 2, "unit_price": 20},
                {"product_id": screw["id"], "quantity": 10, "unit_price": 1},
            ],
        },
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["title"] == "Banco Grande"
    assert resp.json()["budget"] == pytest.approx(50.0)
    assert [line["product_name"] for line in resp.json()["lines"]] == ["Pinus", "Parafuso"]

    assert client.delete(f"/projects/{project['id']}").status_code == 204
    assert client.get(f"/projects/{project['id']}").status_code == 404
    assert client.get("/transactions").json()[0]["project_id"] is None
    assert client.delete(f"/products/{pine['id']}").status_code == 204
