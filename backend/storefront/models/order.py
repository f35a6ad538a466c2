from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from storefront.db import Base
from storefront.utils.clock import utcnow


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(128), nullable=False, index=True)
    customer_name = Column(String(256), nullable=False)
    customer_email = Column(String(256), nullable=False)
    customer_phone = Column(String(64), nullable=False)
    shipping_address = Column(Text, nullable=False)
    city = Column(String(128), nullable=False)
    zip_code = Column(String(32), nullable=False)
    payment_method = Column(String(64), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping = Column(Numeric(12, 2), nullable=False)
    taxes = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    status = Column(String(32), nullable=False, default="confirmed")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    # snapshot: product_id is informational, name and price are frozen copies
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(256), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
