from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from storefront.db import Base
from storefront.utils.clock import utcnow


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(128), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category slug={self.slug}>"
