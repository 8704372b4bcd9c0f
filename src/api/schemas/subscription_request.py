"""Request schemas for Subscription API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator

from src.domain.subscription import DeliveryFrequency, DeliveryTime, Weekday
from src.domain.subscription_order import OrderStatus


class SubscriptionItemRequestSchema(BaseModel):
    product_id: int = Field(..., description="Product identifier")
    quantity: int = Field(..., ge=1, description="Units per delivery (must be >= 1)")
    unit: Optional[str] = Field(default=None, description="Unit of measure")


class CreateSubscriptionRequestSchema(BaseModel):
    """
    Request schema for creating a subscription

    Used for POST /subscriptions endpoint.
    """

    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer identifier (required, non-empty)"
    )

    distributor_id: str = Field(
        ...,
        min_length=1,
        description="Distributor identifier (required, non-empty)"
    )

    products: List[SubscriptionItemRequestSchema] = Field(
        ...,
        min_length=1,
        description="Products to deliver (at least one)"
    )

    frequency: DeliveryFrequency = Field(
        ...,
        description="daily, twice_week, alternate_days, weekly, fortnightly or monthly"
    )

    delivery_days: Optional[List[str]] = Field(
        default=None,
        description="Weekday names, e.g. ['monday', 'thursday']"
    )

    delivery_day_of_month: Optional[int] = Field(
        default=None,
        ge=1,
        le=28,
        description="Day of month for monthly deliveries (1-28)"
    )

    start_date: date = Field(..., description="First possible delivery date")

    end_date: Optional[date] = Field(default=None, description="Last possible delivery date")

    delivery_time: DeliveryTime = Field(
        default=DeliveryTime.MORNING,
        description="Preferred delivery slot"
    )

    delivery_address: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Delivery address"
    )

    payment_method: str = Field(default="cash", description="Payment method")

    special_instructions: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Instructions copied onto every generated order"
    )

    @field_validator('delivery_days')
    @classmethod
    def validate_delivery_days(cls, v):
        """Normalize weekday names and reject unknown ones"""
        if v is None:
            return v
        allowed = {day.value for day in Weekday}
        normalized = [str(day).strip().lower() for day in v]
        unknown = [day for day in normalized if day not in allowed]
        if unknown:
            raise ValueError(f"Unknown delivery days: {', '.join(unknown)}")
        return normalized

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cust_123",
                "distributor_id": "dist_456",
                "products": [
                    {"product_id": 1, "quantity": 2},
                    {"product_id": 2, "quantity": 1}
                ],
                "frequency": "weekly",
                "delivery_days": ["monday"],
                "start_date": "2024-01-01",
                "delivery_time": "morning",
                "delivery_address": {"street": "12 Lake Road", "city": "Pune"},
                "payment_method": "cash"
            }
        }


class UpdateOrderStatusRequestSchema(BaseModel):
    """
    Request schema for changing an order's status

    Used for PATCH /subscription-orders/{order_id}/status endpoint.
    """

    status: OrderStatus = Field(
        ...,
        description="Target status (PENDING, CONFIRMED, IN_TRANSIT, DELIVERED, CANCELLED)"
    )

    class Config:
        json_schema_extra = {"example": {"status": "CONFIRMED"}}
