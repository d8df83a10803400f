from sqlalchemy import Column, Integer, String

from core.models import Base, TimestampMixin


class Client(Base, TimestampMixin):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    mobile = Column(String(64), nullable=True)
    # CPF or CNPJ, digits only
    document = Column(String(32), nullable=True)
    street = Column(String(255), nullable=True)
    number = Column(String(32), nullable=True)
    neighborhood = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    state = Column(String(2), nullable=True)
    zip_code = Column(String(16), nullable=True)
