"""Data Transfer Objects for Subscription Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, model_validator

from src.domain.subscription import DeliveryFrequency, DeliveryTime
from src.domain.subscription_order import OrderStatus


class SubscriptionItemCommandDTO(BaseModel):
    """Product line requested for a new subscription"""

    product_id: int = Field(
        ...,
        description="Product identifier"
    )

    quantity: int = Field(
        ...,
        ge=1,
        description="Units per delivery (must be >= 1)"
    )

    unit: Optional[str] = Field(
        default=None,
        description="Unit of measure (defaults to the product's unit)"
    )


class CreateSubscriptionCommandDTO(BaseModel):
    """
    Command DTO for creating a subscription

    Used as input to CreateSubscription use case.
    """

    customer_id: str = Field(
        ...,
        description="Customer (owner) identifier"
    )

    distributor_id: str = Field(
        ...,
        description="Distributor (fulfiller) identifier"
    )

    items: List[SubscriptionItemCommandDTO] = Field(
        ...,
        description="Products to deliver"
    )

    frequency: DeliveryFrequency = Field(
        ...,
        description="Recurrence frequency"
    )

    delivery_days: Optional[List[str]] = Field(
        default=None,
        description="Weekday names (required for weekly, defaulted when missing)"
    )

    delivery_day_of_month: Optional[int] = Field(
        default=None,
        ge=1,
        le=28,
        description="Day of month for monthly deliveries (1-28)"
    )

    start_date: date = Field(
        ...,
        description="First possible delivery date"
    )

    end_date: Optional[date] = Field(
        default=None,
        description="Last possible delivery date (must be after start_date)"
    )

    delivery_time: DeliveryTime = Field(
        default=DeliveryTime.MORNING,
        description="Preferred delivery slot"
    )

    delivery_address: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Delivery address snapshot"
    )

    payment_method: str = Field(
        default="cash",
        description="Payment method for generated orders"
    )

    special_instructions: Optional[str] = Field(
        default=None,
        description="Instructions copied onto generated orders"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cust_123",
                "distributor_id": "dist_456",
                "items": [
                    {"product_id": 1, "quantity": 2},
                    {"product_id": 2, "quantity": 1},
                ],
                "frequency": "weekly",
                "delivery_days": ["monday"],
                "start_date": "2024-01-01",
                "delivery_time": "morning",
            }
        }


class SubscriptionItemDTO(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal
    unit: str
    line_total: Decimal


class SubscriptionResponseDTO(BaseModel):
    """
    Response DTO for subscription operations

    order_ids is derived from the orders that reference this subscription.
    """

    subscription_id: int = Field(..., description="Subscription ID")
    customer_id: str = Field(..., description="Customer identifier")
    distributor_id: str = Field(..., description="Distributor identifier")
    frequency: str = Field(..., description="Recurrence frequency")
    delivery_days: List[str] = Field(default_factory=list, description="Delivery weekdays")
    delivery_day_of_month: Optional[int] = Field(default=None, description="Monthly day")
    start_date: date = Field(..., description="Start date")
    end_date: Optional[date] = Field(default=None, description="End date")
    delivery_time: str = Field(..., description="Delivery slot")
    status: str = Field(..., description="Subscription status")
    next_delivery_date: Optional[date] = Field(default=None, description="Next due delivery")
    last_delivery_date: Optional[date] = Field(default=None, description="Last fulfilled delivery")
    total_deliveries: int = Field(..., description="Orders generated so far")
    items: List[SubscriptionItemDTO] = Field(default_factory=list, description="Product lines")
    order_ids: List[int] = Field(default_factory=list, description="Generated order IDs")
    created_at: datetime = Field(..., description="Creation timestamp")


class MaterializeOrderCommandDTO(BaseModel):
    """
    Command DTO for generating one order from a subscription

    Used as input to MaterializeSubscriptionOrder use case.
    """

    subscription_id: int = Field(
        ...,
        description="Subscription to generate the order for"
    )

    delivery_date: date = Field(
        ...,
        description="Due delivery date the order fulfils"
    )

    requested_at: Optional[datetime] = Field(
        default=None,
        description="Generation time (defaults to now)"
    )


class SubscriptionOrderItemDTO(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    unit: str
    line_total: Decimal


class SubscriptionOrderResponseDTO(BaseModel):
    """Response DTO for subscription order operations"""

    order_id: int = Field(..., description="Order ID")
    order_number: str = Field(..., description="Unique order number")
    subscription_id: int = Field(..., description="Parent subscription ID")
    customer_id: str = Field(..., description="Customer identifier")
    distributor_id: str = Field(..., description="Distributor identifier")
    status: str = Field(..., description="Order status")
    payment_status: str = Field(..., description="Payment status")
    delivery_date: date = Field(..., description="Delivery date")
    delivery_time: str = Field(..., description="Delivery slot")
    delivery_address: Optional[Dict[str, Any]] = Field(default=None, description="Address snapshot")
    payment_method: str = Field(..., description="Payment method")
    total_amount: Decimal = Field(..., description="Sum of line totals")
    notes: Optional[str] = Field(default=None, description="Order notes")
    items: List[SubscriptionOrderItemDTO] = Field(default_factory=list, description="Line snapshots")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": 1,
                "order_number": "SUB-20240101063000123456-1-9F2C4A1B",
                "subscription_id": 1,
                "customer_id": "cust_123",
                "distributor_id": "dist_456",
                "status": "PENDING",
                "payment_status": "PENDING",
                "delivery_date": "2024-01-01",
                "delivery_time": "morning",
                "payment_method": "cash",
                "total_amount": "40.000000",
                "items": [
                    {
                        "product_id": 1,
                        "product_name": "Toned Milk 1L",
                        "quantity": 2,
                        "unit_price": "10.000000",
                        "unit": "litre",
                        "line_total": "20.000000",
                    }
                ],
                "created_at": "2024-01-01T06:30:00Z",
            }
        }


class ListSubscriptionOrdersQueryDTO(BaseModel):
    subscription_id: Optional[int] = None
    customer_id: Optional[str] = None
    distributor_id: Optional[str] = None
    status: Optional[OrderStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class ListSubscriptionOrdersResponseDTO(BaseModel):
    orders: List[SubscriptionOrderResponseDTO]
    count: int


class UpdateOrderStatusCommandDTO(BaseModel):
    order_id: int = Field(..., description="Order ID")
    status: OrderStatus = Field(..., description="Target status")


class AdvanceScheduleCommandDTO(BaseModel):
    """
    Command DTO for moving a subscription past a fulfilled delivery

    Used as input to AdvanceSubscriptionSchedule use case.
    """

    subscription_id: int = Field(..., description="Subscription ID")
    fulfilled_date: date = Field(..., description="Due date that was just materialized")
    now: datetime = Field(..., description="Processing time")


class ScheduleAdvanceResponseDTO(BaseModel):
    subscription_id: int
    status: str
    next_delivery_date: Optional[date] = None
    last_delivery_date: Optional[date] = None
    total_deliveries: int
    completed: bool = False


class RunErrorDTO(BaseModel):
    """Failure recorded while processing one subscription (or the whole run)"""

    subscription_id: Optional[int] = Field(
        default=None,
        description="Failing subscription (None for run-level failures)"
    )

    error: str = Field(..., description="Error message")

    timestamp: datetime = Field(..., description="When the failure was recorded")


class SubscriptionRunReportDTO(BaseModel):
    """
    Summary of one order generation run

    Not persisted; returned to the caller and logged.
    """

    status: str = Field(
        ...,
        description="completed, already_running, error or disabled"
    )

    total_processed: int = Field(default=0, description="Due subscriptions examined")
    orders_created: int = Field(default=0, description="Orders materialized")
    duplicates_skipped: int = Field(
        default=0,
        description="Due dates that already had an order (schedule advanced without a new order)"
    )
    subscriptions_completed: int = Field(default=0, description="Subscriptions that reached end_date")
    errors: int = Field(default=0, description="Failures recorded")
    error_details: List[RunErrorDTO] = Field(default_factory=list, description="Failure details")
    started_at: datetime = Field(..., description="Run start (processing time)")
    execution_time_ms: int = Field(default=0, description="Wall-clock duration")

    @model_validator(mode="after")
    def check_error_count(self):
        if self.errors < len(self.error_details):
            raise ValueError("errors must cover every error detail")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "status": "completed",
                "total_processed": 3,
                "orders_created": 2,
                "duplicates_skipped": 0,
                "subscriptions_completed": 1,
                "errors": 1,
                "error_details": [
                    {
                        "subscription_id": 2,
                        "error": "Failed to create subscription order",
                        "timestamp": "2024-01-01T06:30:01Z",
                    }
                ],
                "started_at": "2024-01-01T06:30:00Z",
                "execution_time_ms": 120,
            }
        }


class SchedulerStatusDTO(BaseModel):
    started: bool = Field(..., description="Periodic trigger is active")
    running: bool = Field(..., description="A run is in progress")
    interval_seconds: int = Field(..., description="Cadence between runs")
    last_report: Optional[SubscriptionRunReportDTO] = Field(
        default=None,
        description="Report of the most recent run"
    )
