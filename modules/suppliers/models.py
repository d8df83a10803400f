from sqlalchemy import Boolean, Column, Integer, String

from core.models import Base, TimestampMixin


class Supplier(Base, TimestampMixin):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # CNPJ (or CPF for individuals), digits only
    document = Column(String(32), nullable=True)
    contact = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address = Column(String(512), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
