from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin
from modules.clients.models import Client
from modules.products.models import Product
from modules.suppliers.models import Supplier


class Sale(Base, TimestampMixin):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    payment_method = Column(String(32), nullable=True)
    notes = Column(String(1024), nullable=True)
    total = Column(Float, nullable=False, default=0.0)

    client = relationship(Client)
    items = relationship("SaleItem", cascade="all, delete-orphan", back_populates="sale", order_by="SaleItem.id")


class SaleItem(Base, TimestampMixin):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship(Product)


class Purchase(Base, TimestampMixin):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    # Copied from the supplier when supplier_id is given
    supplier_name = Column(String(255), nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    invoice_number = Column(String(64), nullable=True)
    notes = Column(String(1024), nullable=True)
    total = Column(Float, nullable=False, default=0.0)

    supplier = relationship(Supplier)
    items = relationship(
        "PurchaseItem", cascade="all, delete-orphan", back_populates="purchase", order_by="PurchaseItem.id"
    )


class PurchaseItem(Base, TimestampMixin):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Float, nullable=False)
    unit_cost = Column(Float, nullable=False)

    purchase = relationship("Purchase", back_populates="items")
    product = relationship(Product)
