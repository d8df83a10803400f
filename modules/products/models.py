from sqlalchemy import Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1024), nullable=True)
    category = Column(String(128), nullable=False, default="Geral")
    product_type = Column(String(64), nullable=False)
    unit = Column(String(32), nullable=False, default="un")
    # Direct cost; authoritative only for raw materials
    cost_price = Column(Float, nullable=False, default=0.0)
    sale_price = Column(Float, nullable=True)
    current_stock = Column(Float, nullable=False, default=0.0)
    min_stock = Column(Integer, nullable=False, default=0)
    supplier = Column(String(255), nullable=True)

    components = relationship(
        "ProductComponent",
        cascade="all, delete-orphan",
        back_populates="product",
        foreign_keys="ProductComponent.product_id",
        order_by="ProductComponent.position",
    )


class ProductComponent(Base, TimestampMixin):
    __tablename__ = "product_components"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    component_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Float, nullable=False, default=1.0)
    position = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="components", foreign_keys=[product_id])
    component = relationship("Product", foreign_keys=[component_id])
