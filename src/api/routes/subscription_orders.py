"""Subscription Order API Routes

FastAPI routes for generated orders and the order generation run.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.subscription_request import UpdateOrderStatusRequestSchema
from src.app.use_cases.subscriptions.dtos import (
    ListSubscriptionOrdersQueryDTO,
    ListSubscriptionOrdersResponseDTO,
    SchedulerStatusDTO,
    SubscriptionOrderResponseDTO,
    SubscriptionRunReportDTO,
    UpdateOrderStatusCommandDTO,
)
from src.app.use_cases.subscriptions import (
    ListSubscriptionOrders,
    GetSubscriptionOrder,
    UpdateSubscriptionOrderStatus,
)
from src.adapter.repositories.subscription_order_repository import SqlAlchemySubscriptionOrderRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_subscription_worker, get_subscription_scheduler
from src.domain.subscription_order import OrderStatus
from src.api.error import ClientError

router = APIRouter(prefix="/subscription-orders", tags=["Subscription Orders"])


@router.post(
    "/process",
    response_model=SubscriptionRunReportDTO,
    status_code=status.HTTP_200_OK,
)
async def process_subscription_orders(worker=Depends(get_subscription_worker)):
    """
    Run order generation now.

    Uses the same worker as the periodic scheduler, so a request made
    while a run is in progress returns `already_running` instead of
    starting a second run.

    **Example response:**
    ```json
    {
      "status": "completed",
      "total_processed": 3,
      "orders_created": 3,
      "duplicates_skipped": 0,
      "subscriptions_completed": 0,
      "errors": 0,
      "error_details": [],
      "started_at": "2024-01-01T06:30:00",
      "execution_time_ms": 85
    }
    ```
    """
    return await worker.run_once()


@router.get(
    "/scheduler/status",
    response_model=SchedulerStatusDTO,
    status_code=status.HTTP_200_OK,
)
async def get_scheduler_status(scheduler=Depends(get_subscription_scheduler)):
    """Report whether the periodic trigger is active and the last run summary."""
    return scheduler.status()


@router.get(
    "",
    response_model=ListSubscriptionOrdersResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_subscription_orders(
    subscription_id: Optional[int] = Query(default=None, description="Parent subscription"),
    customer_id: Optional[str] = Query(default=None, description="Customer filter"),
    distributor_id: Optional[str] = Query(default=None, description="Distributor filter"),
    order_status: Optional[OrderStatus] = Query(default=None, alias="status", description="Status filter"),
    date_from: Optional[date] = Query(default=None, description="Earliest delivery date"),
    date_to: Optional[date] = Query(default=None, description="Latest delivery date"),
    limit: int = Query(default=50, ge=1, le=200, description="Maximum results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    session: AsyncSession = Depends(get_session)
):
    """
    List generated orders, latest delivery date first.

    **Returns:**
    - 200: Matching orders
    - 400: Invalid filters
    """
    query = ListSubscriptionOrdersQueryDTO(
        subscription_id=subscription_id,
        customer_id=customer_id,
        distributor_id=distributor_id,
        status=order_status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )

    use_case = ListSubscriptionOrders(SqlAlchemySubscriptionOrderRepository(session))
    result = await use_case.execute(query)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get(
    "/{order_id}",
    response_model=SubscriptionOrderResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_subscription_order(
    order_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Get a generated order with its line item snapshots.

    **Returns:**
    - 200: Order found
    - 404: Order not found
    """
    use_case = GetSubscriptionOrder(SqlAlchemySubscriptionOrderRepository(session))
    result = await use_case.execute(order_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.patch(
    "/{order_id}/status",
    response_model=SubscriptionOrderResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Transition not allowed",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_STATUS_TRANSITION",
                            "message": "Cannot move order from DELIVERED to PENDING"
                        }
                    }
                }
            }
        }
    }
)
async def update_subscription_order_status(
    order_id: int,
    request: UpdateOrderStatusRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Move an order along PENDING -> CONFIRMED -> IN_TRANSIT -> DELIVERED,
    or cancel it before delivery.

    **Returns:**
    - 200: Status updated
    - 404: Order not found
    - 409: Transition not allowed
    """
    use_case = UpdateSubscriptionOrderStatus(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionOrderRepository(session),
    )
    result = await use_case.execute(
        UpdateOrderStatusCommandDTO(order_id=order_id, status=request.status)
    )

    if result.is_err():
        if result.error.code == "SUBSCRIPTION_ORDER_NOT_FOUND":
            raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)
        if result.error.code == "INVALID_STATUS_TRANSITION":
            raise ClientError(result.error, status_code=status.HTTP_409_CONFLICT)
        raise ClientError(result.error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return result.value
