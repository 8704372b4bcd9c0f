"""Subscription API Routes

FastAPI routes for subscription lifecycle operations.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.subscription_request import CreateSubscriptionRequestSchema
from src.app.use_cases.subscriptions.dtos import (
    CreateSubscriptionCommandDTO,
    SubscriptionItemCommandDTO,
    SubscriptionResponseDTO,
)
from src.app.use_cases.subscriptions import (
    CreateSubscription,
    GetSubscription,
    PauseSubscription,
    ResumeSubscription,
    CancelSubscription,
)
from src.adapter.repositories.subscription_repository import SqlAlchemySubscriptionRepository
from src.adapter.repositories.subscription_order_repository import SqlAlchemySubscriptionOrderRepository
from src.adapter.repositories.product_repository import SqlAlchemyProductRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])

NOT_FOUND_CODES = {"SUBSCRIPTION_NOT_FOUND", "PRODUCT_NOT_FOUND"}


def _raise_for_error(error):
    if error.code in NOT_FOUND_CODES:
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code.endswith("_FAILED"):
        raise ClientError(error, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise ClientError(error)


@router.post(
    "",
    response_model=SubscriptionResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Validation error or insufficient stock",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_STOCK",
                            "message": "Insufficient stock for Toned Milk 1L. Available: 1"
                        }
                    }
                }
            }
        },
        404: {
            "description": "Product not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PRODUCT_NOT_FOUND",
                            "message": "Product not found: 99"
                        }
                    }
                }
            }
        }
    }
)
async def create_subscription(
    request: CreateSubscriptionRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Create a recurring delivery subscription.

    Unit prices are captured from the product catalog and the subscribed
    quantities are reserved from stock. The first delivery is due on
    `start_date`.

    **Returns:**
    - 201: Subscription created
    - 400: Invalid dates, delivery days or insufficient stock
    - 404: Product not found
    """
    uow = SqlAlchemyUnitOfWork(session)
    subscription_repo = SqlAlchemySubscriptionRepository(session)
    product_repo = SqlAlchemyProductRepository(session)

    command = CreateSubscriptionCommandDTO(
        customer_id=request.customer_id,
        distributor_id=request.distributor_id,
        items=[
            SubscriptionItemCommandDTO(
                product_id=item.product_id,
                quantity=item.quantity,
                unit=item.unit,
            )
            for item in request.products
        ],
        frequency=request.frequency,
        delivery_days=request.delivery_days,
        delivery_day_of_month=request.delivery_day_of_month,
        start_date=request.start_date,
        end_date=request.end_date,
        delivery_time=request.delivery_time,
        delivery_address=request.delivery_address,
        payment_method=request.payment_method,
        special_instructions=request.special_instructions,
    )

    use_case = CreateSubscription(uow, subscription_repo, product_repo)
    result = await use_case.execute(command)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.get(
    "/{subscription_id}",
    response_model=SubscriptionResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_subscription(
    subscription_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Get a subscription with its product lines and generated order IDs.

    **Returns:**
    - 200: Subscription found
    - 404: Subscription not found
    """
    use_case = GetSubscription(
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemySubscriptionOrderRepository(session),
    )
    result = await use_case.execute(subscription_id)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.put(
    "/{subscription_id}/pause",
    response_model=SubscriptionResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def pause_subscription(
    subscription_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Pause an active subscription. No orders are generated while paused.

    **Returns:**
    - 200: Subscription paused
    - 400: Subscription is not active
    - 404: Subscription not found
    """
    use_case = PauseSubscription(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemySubscriptionOrderRepository(session),
    )
    result = await use_case.execute(subscription_id)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.put(
    "/{subscription_id}/resume",
    response_model=SubscriptionResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def resume_subscription(
    subscription_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Resume a paused subscription. The next delivery becomes due today.

    **Returns:**
    - 200: Subscription resumed
    - 400: Subscription is not paused
    - 404: Subscription not found
    """
    use_case = ResumeSubscription(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemySubscriptionOrderRepository(session),
    )
    result = await use_case.execute(subscription_id)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.delete(
    "/{subscription_id}",
    response_model=SubscriptionResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Already cancelled",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "SUBSCRIPTION_ALREADY_CANCELLED",
                            "message": "Subscription is already cancelled"
                        }
                    }
                }
            }
        }
    }
)
async def cancel_subscription(
    subscription_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Cancel a subscription.

    The subscription and its orders are kept; no further orders are
    generated and reserved stock is returned.

    **Returns:**
    - 200: Subscription cancelled
    - 400: Already cancelled
    - 404: Subscription not found
    """
    use_case = CancelSubscription(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemySubscriptionRepository(session),
        SqlAlchemySubscriptionOrderRepository(session),
        SqlAlchemyProductRepository(session),
    )
    result = await use_case.execute(subscription_id)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value
