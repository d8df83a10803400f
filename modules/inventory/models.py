from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin
from modules.products.models import Product
from modules.projects.models import Project


class StockMovement(Base, TimestampMixin):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    movement_type = Column(String(8), nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=True)
    total_value = Column(Float, nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    reference_type = Column(String(16), nullable=False, default="manual")
    date = Column(Date, nullable=False)
    notes = Column(String(1024), nullable=True)
    # Stock level right after this movement was applied
    resulting_stock = Column(Float, nullable=False, default=0.0)

    product = relationship(Product)
    project = relationship(Project)
