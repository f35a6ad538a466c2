from sqlalchemy import Column, DateTime, Integer, String

from storefront.db import Base
from storefront.utils.clock import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    role = Column(String(32), nullable=False, default="customer")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
