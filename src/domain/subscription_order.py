"""Subscription Order Domain Entity

Concrete, dated delivery order generated from a subscription.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String, Date, JSON, Text
from src.domain.base import BaseModel, IdType


class OrderStatus(str, Enum):
    """Order fulfilment status"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    """Order payment status"""
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


_FULFILMENT_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.IN_TRANSIT,
    OrderStatus.DELIVERED,
]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    Check whether an order may move from current to target status

    Fulfilment only moves forward (steps may be skipped). CANCELLED is
    reachable from any state before DELIVERED. DELIVERED and CANCELLED
    are terminal.
    """
    if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return _FULFILMENT_SEQUENCE.index(target) > _FULFILMENT_SEQUENCE.index(current)


class SubscriptionOrder(BaseModel, table=True):
    """
    Subscription Order - Delivery order materialized from a subscription

    Domain Rules:
    - subscription_id is immutable once written
    - order_number must be unique
    - At most one order per (subscription_id, delivery_date)
    - total_amount is the sum of item line totals at generation time and is never recomputed
    - Status follows can_transition()
    """

    __tablename__ = "subscription_orders"
    __table_args__ = (
        Index('ix_subscription_orders_order_number', 'order_number', unique=True),
        Index(
            'ux_subscription_orders_subscription_delivery',
            'subscription_id', 'delivery_date',
            unique=True,
        ),
        Index('ix_subscription_orders_customer_id', 'customer_id'),
        Index('ix_subscription_orders_distributor_id', 'distributor_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order identifier (auto-increment)"
    )

    order_number: str = Field(
        sa_column=Column(String(80), nullable=False),
        description="Unique human-readable order number (e.g., SUB-20240101000000000000-1-9F2C4A1B)"
    )

    subscription_id: int = Field(
        sa_column=Column(IdType, ForeignKey("subscriptions.id"), nullable=False),
        description="Parent subscription"
    )

    customer_id: str = Field(
        description="Customer identifier"
    )

    distributor_id: str = Field(
        description="Distributor identifier"
    )

    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        description="Order status"
    )

    payment_status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        description="Payment status"
    )

    delivery_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Scheduled delivery date"
    )

    delivery_time: str = Field(
        default="morning",
        sa_column=Column(String(20), nullable=False, default="morning"),
        description="Delivery slot"
    )

    delivery_address: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Delivery address snapshot"
    )

    payment_method: str = Field(
        default="cash",
        sa_column=Column(String(50), nullable=False, default="cash"),
        description="Payment method"
    )

    total_amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Sum of line totals (precision: 18,6)"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Notes copied from subscription special instructions"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Order creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "order_number": "SUB-20240101063000123456-1-9F2C4A1B",
                "subscription_id": 1,
                "customer_id": "cust_123",
                "distributor_id": "dist_456",
                "status": "PENDING",
                "payment_status": "PENDING",
                "delivery_date": "2024-01-01",
                "delivery_time": "morning",
                "total_amount": "40.000000",
            }
        }


class SubscriptionOrderItem(BaseModel, table=True):
    """
    Subscription Order Item - Snapshot of a subscription line at generation time

    Domain Rules:
    - line_total = quantity * unit_price
    - Never updated after creation
    """

    __tablename__ = "subscription_order_items"
    __table_args__ = (
        Index('ix_subscription_order_items_order_id', 'order_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order item identifier (auto-increment)"
    )

    order_id: int = Field(
        sa_column=Column(IdType, ForeignKey("subscription_orders.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to SubscriptionOrder"
    )

    product_id: int = Field(
        sa_column=Column(IdType, nullable=False),
        description="Product reference"
    )

    product_name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Product display name at generation time"
    )

    quantity: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Units delivered"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Unit price snapshot"
    )

    unit: str = Field(
        default="piece",
        sa_column=Column(String(20), nullable=False, default="piece"),
        description="Unit of measure"
    )

    line_total: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="quantity * unit_price"
    )
