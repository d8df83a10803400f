from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin
from modules.clients.models import Client
from modules.products.models import Product


class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    description = Column(String(2048), nullable=True)
    status = Column(String(32), nullable=False, default="quote")
    budget = Column(Float, nullable=False, default=0.0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    labor_cost = Column(Float, nullable=False, default=0.0)
    profit_margin = Column(Float, nullable=True)

    client = relationship(Client)
    lines = relationship(
        "ProjectLine", cascade="all, delete-orphan", back_populates="project", order_by="ProjectLine.id"
    )


class ProjectLine(Base, TimestampMixin):
    __tablename__ = "project_lines"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False, default=0.0)

    project = relationship("Project", back_populates="lines")
    product = relationship(Product)
