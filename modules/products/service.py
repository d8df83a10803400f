import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import distinct
from sqlalchemy.orm import Session

from core.csv_io import decimal_column, integer_column, pick_columns, read_csv_text, to_csv_text
from core.errors import NotFoundException, ValidationAppException
from core.settings import sale_price_from_margin
from modules.costing.catalog import build_catalog
from modules.costing.rollup import compute_cost, find_cycle
from modules.costing.schemas import CatalogItem
from modules.products import models, schemas
from modules.products.types import ProductType
from modules.projects import models as project_models
from modules.sales import models as sales_models

logger = logging.getLogger(__name__)

PRODUCT_CSV_ALIASES = {
    "name": ("nome", "name", "produto"),
    "description": ("descricao", "descrição", "description"),
    "category": ("categoria", "category"),
    "product_type": ("tipo", "type"),
    "cost_price": ("preco_custo", "preço_custo", "cost_price", "custo"),
    "sale_price": ("preco_venda", "preço_venda", "sale_price", "venda"),
    "current_stock": ("estoque", "stock", "quantidade"),
    "min_stock": ("estoque_minimo", "estoque_mínimo", "min_stock"),
    "unit": ("unidade", "unit"),
}

PRODUCT_CSV_COLUMNS = (
    "nome",
    "descricao",
    "categoria",
    "preco_custo",
    "preco_venda",
    "estoque",
    "estoque_minimo",
    "unidade",
    "tipo",
)

# Names used by the original spreadsheet exports
LEGACY_TYPE_NAMES = {
    "material_bruto": ProductType.RAW_MATERIAL,
    "parte_produto": ProductType.SUBASSEMBLY,
    "produto_pronto": ProductType.FINISHED_GOOD,
}


def _catalog_record(product: models.Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "type": product.product_type,
        "unit": product.unit,
        "unit_cost": product.cost_price,
        "components": [
            {"component_id": comp.component_id, "quantity": comp.quantity} for comp in product.components
        ],
    }


def catalog_from_products(products: Iterable[models.Product]) -> Dict[Any, CatalogItem]:
    return build_catalog(_catalog_record(p) for p in products)


def load_catalog(db: Session) -> Dict[Any, CatalogItem]:
    return catalog_from_products(db.query(models.Product).all())


def _serialize_product(product: models.Product, unit_cost: float) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "product_type": product.product_type,
        "unit": product.unit,
        "cost_price": product.cost_price,
        "sale_price": product.sale_price,
        "current_stock": product.current_stock,
        "min_stock": product.min_stock,
        "supplier": product.supplier,
        "unit_cost": unit_cost,
        "components": [
            {
                "component_id": comp.component_id,
                "component_name": comp.component.name if comp.component is not None else None,
                "quantity": comp.quantity,
            }
            for comp in product.components
        ],
    }


def _get_product_model(db: Session, product_id: int) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise NotFoundException("Produto não encontrado")
    return product


def _build_components(
    db: Session, components_in: List[schemas.ComponentCreate], product_id: Optional[int] = None
) -> List[models.ProductComponent]:
    components = []
    for position, comp in enumerate(components_in):
        if product_id is not None and comp.component_id == product_id:
            raise ValidationAppException("Um produto não pode ser componente de si mesmo")
        component = db.query(models.Product).filter(models.Product.id == comp.component_id).first()
        if not component:
            raise NotFoundException(f"Componente {comp.component_id} não encontrado")
        components.append(
            models.ProductComponent(
                component_id=component.id, component=component, quantity=comp.quantity, position=position
            )
        )
    return components


def _apply_fields(product: models.Product, product_in: schemas.ProductCreate) -> None:
    product.name = product_in.name
    product.description = product_in.description
    product.category = product_in.category
    product.product_type = product_in.product_type.value
    product.unit = product_in.unit
    product.cost_price = product_in.cost_price
    product.sale_price = product_in.sale_price
    product.current_stock = product_in.current_stock
    product.min_stock = product_in.min_stock
    product.supplier = product_in.supplier


def _resolve_sale_price(db: Session, product: models.Product, profit_margin: Optional[float]) -> None:
    if product.sale_price is not None or profit_margin is None:
        return
    cost = compute_cost(load_catalog(db), product.id)
    product.sale_price = sale_price_from_margin(cost, profit_margin)


def create_product(db: Session, product_in: schemas.ProductCreate) -> Dict[str, Any]:
    product = models.Product()
    _apply_fields(product, product_in)
    product.components = _build_components(db, product_in.components)

    db.add(product)
    db.flush()
    _resolve_sale_price(db, product, product_in.profit_margin)
    db.commit()
    db.refresh(product)
    logger.info("Created product %s (%s, %s)", product.id, product.name, product.product_type)
    return get_product(db, product.id)


def list_products(db: Session) -> List[Dict[str, Any]]:
    products = db.query(models.Product).order_by(models.Product.id).all()
    catalog = catalog_from_products(products)
    return [_serialize_product(p, compute_cost(catalog, p.id)) for p in products]


def get_product(db: Session, product_id: int) -> Dict[str, Any]:
    product = _get_product_model(db, product_id)
    return _serialize_product(product, compute_cost(load_catalog(db), product.id))


def update_product(db: Session, product_id: int, product_in: schemas.ProductUpdate) -> Dict[str, Any]:
    product = _get_product_model(db, product_id)
    _apply_fields(product, product_in)
    product.components = _build_components(db, product_in.components, product_id=product.id)
    db.flush()

    cycle = find_cycle(load_catalog(db), product.id)
    if cycle:
        db.rollback()
        raise ValidationAppException(
            "Composição circular: " + " -> ".join(str(pid) for pid in cycle)
        )

    _resolve_sale_price(db, product, product_in.profit_margin)
    db.commit()
    logger.info("Updated product %s (%d components)", product.id, len(product_in.components))
    return get_product(db, product.id)


def delete_product(db: Session, product_id: int) -> None:
    product = _get_product_model(db, product_id)
    parents = (
        db.query(models.Product)
        .join(models.ProductComponent, models.ProductComponent.product_id == models.Product.id)
        .filter(models.ProductComponent.component_id == product_id)
        .all()
    )
    if parents:
        names = ", ".join(sorted({p.name for p in parents}))
        raise ValidationAppException(f"Produto usado como componente em: {names}")

    usages = [
        (label, db.query(distinct(owner_id)).filter(line_model.product_id == product_id).count())
        for label, line_model, owner_id in (
            ("projeto(s)", project_models.ProjectLine, project_models.ProjectLine.project_id),
            ("venda(s)", sales_models.SaleItem, sales_models.SaleItem.sale_id),
            ("compra(s)", sales_models.PurchaseItem, sales_models.PurchaseItem.purchase_id),
        )
    ]
    used_in = [f"{count} {label}" for label, count in usages if count]
    if used_in:
        raise ValidationAppException(f"Produto usado em: {', '.join(used_in)}")

    db.delete(product)
    db.commit()
    logger.info("Deleted product %s", product_id)


def _parse_type(value: str) -> ProductType:
    key = (value or "").strip().lower()
    if not key:
        return ProductType.FINISHED_GOOD
    if key in LEGACY_TYPE_NAMES:
        return LEGACY_TYPE_NAMES[key]
    try:
        return ProductType(key)
    except ValueError as exc:
        raise ValidationAppException(f"Tipo de produto inválido: {value}") from exc


def import_products_csv(db: Session, text: str) -> Dict[str, Any]:
    frame = pick_columns(read_csv_text(text), PRODUCT_CSV_ALIASES)
    costs = decimal_column(frame["cost_price"])
    sale_prices = decimal_column(frame["sale_price"])
    stocks = decimal_column(frame["current_stock"])
    min_stocks = integer_column(frame["min_stock"])

    imported = 0
    skipped: List[int] = []
    for idx, row in enumerate(frame.to_dict("records")):
        line_number = idx + 2  # header is line 1
        if not row["name"]:
            logger.warning("CSV line %d: product without a name, skipped", line_number)
            skipped.append(line_number)
            continue
        product_in = schemas.ProductCreate(
            name=row["name"],
            description=row["description"] or "",
            category=row["category"] or "Geral",
            product_type=_parse_type(row["product_type"]),
            unit=row["unit"] or "un",
            cost_price=float(costs.iloc[idx]),
            sale_price=float(sale_prices.iloc[idx]) if row["sale_price"] else None,
            current_stock=float(stocks.iloc[idx]),
            min_stock=int(min_stocks.iloc[idx]),
        )
        product = models.Product()
        _apply_fields(product, product_in)
        db.add(product)
        imported += 1

    db.commit()
    logger.info("Imported %d products from CSV (%d lines skipped)", imported, len(skipped))
    return {"imported": imported, "skipped_lines": skipped}


def export_products_csv(db: Session) -> str:
    products = db.query(models.Product).order_by(models.Product.id).all()
    rows = [
        {
            "nome": p.name,
            "descricao": p.description or "",
            "categoria": p.category,
            "preco_custo": p.cost_price,
            "preco_venda": p.sale_price if p.sale_price is not None else "",
            "estoque": p.current_stock,
            "estoque_minimo": p.min_stock,
            "unidade": p.unit,
            "tipo": p.product_type,
        }
        for p in products
    ]
    return to_csv_text(rows, PRODUCT_CSV_COLUMNS)
