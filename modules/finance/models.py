from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin
from modules.projects.models import Project


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(16), nullable=False)
    category = Column(String(128), nullable=False)
    description = Column(String(1024), nullable=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    project = relationship(Project)
