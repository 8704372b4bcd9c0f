"""Subscription Domain Entity

Standing agreement to deliver a set of products to a customer on a
recurring schedule.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String, Date, JSON, Text
from src.domain.base import BaseModel, IdType


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status"""
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class DeliveryFrequency(str, Enum):
    """Recurrence frequency of a subscription"""
    DAILY = "daily"
    TWICE_WEEK = "twice_week"
    ALTERNATE_DAYS = "alternate_days"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"


class DeliveryTime(str, Enum):
    """Preferred delivery slot"""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    FLEXIBLE = "flexible"


class Weekday(str, Enum):
    """Weekday names, declared in date.weekday() order"""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class Subscription(BaseModel, table=True):
    """
    Subscription - Recurring product delivery agreement

    Domain Rules:
    - Only active subscriptions are picked up for order generation
    - next_delivery_date (when set) is never before start_date
    - next_delivery_date is cleared when the subscription completes or is cancelled
    - total_deliveries grows by one per materialized order
    - Weekly subscriptions always carry at least one delivery day
    - Cancellation is a status change, rows are never deleted
    - Generated orders reference the subscription (subscription_orders.subscription_id);
      the list of orders is derived from that back-reference
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index('ix_subscriptions_customer_id', 'customer_id'),
        Index('ix_subscriptions_distributor_id', 'distributor_id'),
        Index('ix_subscriptions_status_next_delivery', 'status', 'next_delivery_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique subscription identifier (auto-increment)"
    )

    customer_id: str = Field(
        description="Customer (owner) identifier"
    )

    distributor_id: str = Field(
        description="Distributor (fulfiller) identifier"
    )

    frequency: DeliveryFrequency = Field(
        description="Recurrence frequency"
    )

    delivery_days: Optional[List[str]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Weekday names used by weekly/twice-weekly/fortnightly/monthly rules"
    )

    delivery_day_of_month: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Day of month (1-28) for monthly deliveries"
    )

    start_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="First possible delivery date"
    )

    end_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Last possible delivery date (None = ongoing)"
    )

    delivery_time: DeliveryTime = Field(
        default=DeliveryTime.MORNING,
        description="Preferred delivery slot"
    )

    delivery_address: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Delivery address snapshot"
    )

    payment_method: str = Field(
        default="cash",
        sa_column=Column(String(50), nullable=False, default="cash"),
        description="Payment method copied onto generated orders"
    )

    special_instructions: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Instructions copied onto generated orders as notes"
    )

    status: SubscriptionStatus = Field(
        default=SubscriptionStatus.ACTIVE,
        description="Subscription status (active, paused, cancelled, completed)"
    )

    next_delivery_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Next due delivery (None = nothing scheduled)"
    )

    last_delivery_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Most recently fulfilled due date"
    )

    last_order_date: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the most recent order generation"
    )

    total_deliveries: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Number of orders generated for this subscription"
    )

    cancelled_at: Optional[datetime] = Field(
        default=None,
        description="Cancellation timestamp"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Subscription creation timestamp"
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
                "customer_id": "cust_123",
                "distributor_id": "dist_456",
                "frequency": "weekly",
                "delivery_days": ["monday", "thursday"],
                "delivery_day_of_month": None,
                "start_date": "2024-01-01",
                "end_date": None,
                "delivery_time": "morning",
                "status": "active",
                "next_delivery_date": "2024-01-04",
                "last_delivery_date": "2024-01-01",
                "total_deliveries": 1,
            }
        }


class SubscriptionItem(BaseModel, table=True):
    """
    Subscription Item - Product line of a subscription

    Domain Rules:
    - quantity >= 1
    - unit_price is the price captured when the subscription was created
    """

    __tablename__ = "subscription_items"
    __table_args__ = (
        Index('ix_subscription_items_subscription_id', 'subscription_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique item identifier (auto-increment)"
    )

    subscription_id: int = Field(
        sa_column=Column(IdType, ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Subscription"
    )

    product_id: int = Field(
        sa_column=Column(IdType, nullable=False),
        description="Product reference"
    )

    quantity: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Units per delivery (>= 1)"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Unit price snapshot (precision: 18,6)"
    )

    unit: str = Field(
        default="piece",
        sa_column=Column(String(20), nullable=False, default="piece"),
        description="Unit of measure"
    )

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.quantity) * self.unit_price
