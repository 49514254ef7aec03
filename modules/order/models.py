"""
Order Module - Models
======================
Order statuses and the SQL table backing the database order gateway.

Orders are written once by checkout (storefront); the admin console only
changes their status.
"""

import enum
from sqlalchemy import Column, String, Numeric, Text, JSON, DateTime
from sqlalchemy.sql import func
from config.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Vocabulary used by other order producers → canonical status
STATUS_ALIASES = {
    "processing": OrderStatus.PREPARING,
    "delivering": OrderStatus.OUT_FOR_DELIVERY,
    "completed": OrderStatus.DELIVERED,
}

STATUS_LABELS = {
    OrderStatus.PENDING: "New Order",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

STATUS_COLORS = {
    OrderStatus.PENDING: "#FF9F40",
    OrderStatus.CONFIRMED: "#3B82F6",
    OrderStatus.PREPARING: "#F59E0B",
    OrderStatus.READY: "#8B5CF6",
    OrderStatus.OUT_FOR_DELIVERY: "#14B8A6",
    OrderStatus.DELIVERED: "#10B981",
    OrderStatus.CANCELLED: "#EF4444",
}

UNKNOWN_STATUS_LABEL = "Unknown"
UNKNOWN_STATUS_COLOR = "#6B7280"


class OrderRecord(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    order_number = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=True, index=True)
    status = Column(String, default=OrderStatus.PENDING.value, nullable=False, index=True)

    items = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    delivery_fee = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    customer_details = Column(JSON, nullable=True)    # {"name": ..., "phone": ...}
    delivery_address = Column(JSON, nullable=True)    # {"type": "pickup"|"delivery", "address": ...}
    payment_method = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    def to_row(self) -> dict:
        """Row in the same shape the HTTP order service returns."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "user_id": self.user_id,
            "status": self.status,
            "items": self.items or [],
            "total_amount": self.total_amount,
            "delivery_fee": self.delivery_fee,
            "tax_amount": self.tax_amount,
            "customer_details": self.customer_details or {},
            "delivery_address": self.delivery_address or {},
            "payment_method": self.payment_method,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Order {self.order_number} ({self.status})>"
