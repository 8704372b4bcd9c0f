"""Unit tests for pause, resume and cancel use cases"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.subscriptions.pause_subscription import PauseSubscription
from src.app.use_cases.subscriptions.resume_subscription import ResumeSubscription
from src.app.use_cases.subscriptions.cancel_subscription import CancelSubscription
from src.domain.subscription import (
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
    DeliveryFrequency,
)


@pytest.fixture
def mock_subscription_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda s: s)
    repo.get_items = AsyncMock(return_value=[
        SubscriptionItem(id=1, subscription_id=1, product_id=10, quantity=2,
                         unit_price=Decimal("10"), unit="litre"),
    ])
    return repo


@pytest.fixture
def mock_order_repo():
    repo = MagicMock()
    repo.list_ids_by_subscription = AsyncMock(return_value=[7, 8])
    return repo


@pytest.fixture
def mock_product_repo():
    repo = MagicMock()
    repo.adjust_stock = AsyncMock()
    return repo


def make_subscription(status=SubscriptionStatus.ACTIVE, **overrides):
    values = dict(
        id=1,
        customer_id="cust_123",
        distributor_id="dist_456",
        frequency=DeliveryFrequency.DAILY,
        start_date=date(2024, 1, 1),
        status=status,
        next_delivery_date=date(2024, 1, 3),
        total_deliveries=2,
        created_at=datetime(2024, 1, 1),
    )
    values.update(overrides)
    return Subscription(**values)


@pytest.mark.asyncio
class TestPauseSubscription:

    async def test_pauses_active_subscription(
        self, mock_uow, mock_subscription_repo, mock_order_repo
    ):
        subscription = make_subscription()
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)
        use_case = PauseSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(1)

        assert result.is_ok()
        assert result.value.status == "paused"
        assert result.value.next_delivery_date == date(2024, 1, 3)
        assert result.value.order_ids == [7, 8]
        mock_uow.commit.assert_called_once()

    async def test_rejects_non_active(self, mock_uow, mock_subscription_repo, mock_order_repo):
        mock_subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(SubscriptionStatus.CANCELLED)
        )
        use_case = PauseSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(1)

        assert result.is_err()
        assert result.error.code == "INVALID_SUBSCRIPTION_STATUS"
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestResumeSubscription:

    async def test_resume_makes_delivery_due_today(
        self, mock_uow, mock_subscription_repo, mock_order_repo
    ):
        """
        Given: Subscription paused with a stale next_delivery_date
        When: Resumed on 2024-02-10
        Then: Active again and due on 2024-02-10
        """
        mock_subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(SubscriptionStatus.PAUSED)
        )
        use_case = ResumeSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(1, now=datetime(2024, 2, 10, 9, 0))

        assert result.is_ok()
        assert result.value.status == "active"
        assert result.value.next_delivery_date == date(2024, 2, 10)

    async def test_resume_before_start_date_keeps_start_date(
        self, mock_uow, mock_subscription_repo, mock_order_repo
    ):
        mock_subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(
                SubscriptionStatus.PAUSED, start_date=date(2024, 3, 1)
            )
        )
        use_case = ResumeSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(1, now=datetime(2024, 2, 10))

        assert result.value.next_delivery_date == date(2024, 3, 1)

    async def test_rejects_active_subscription(
        self, mock_uow, mock_subscription_repo, mock_order_repo
    ):
        mock_subscription_repo.get_by_id = AsyncMock(return_value=make_subscription())
        use_case = ResumeSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(1)

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_PAUSED"

    async def test_resume_missing_subscription_is_not_found(
        self, mock_uow, mock_subscription_repo, mock_order_repo
    ):
        """
        Given: No subscription with the requested id
        When: Resumed
        Then: SUBSCRIPTION_NOT_FOUND, nothing committed
        """
        mock_subscription_repo.get_by_id = AsyncMock(return_value=None)
        use_case = ResumeSubscription(mock_uow, mock_subscription_repo, mock_order_repo)

        result = await use_case.execute(999)

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_FOUND"
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestCancelSubscription:

    async def test_cancel_active_returns_stock(
        self, mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
    ):
        """
        Given: Active subscription reserving 2 units of product 10
        When: Cancelled
        Then: Status cancelled, next delivery cleared, 2 units returned to stock
        """
        subscription = make_subscription()
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)
        use_case = CancelSubscription(
            mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
        )

        result = await use_case.execute(1)

        assert result.is_ok()
        assert result.value.status == "cancelled"
        assert result.value.next_delivery_date is None
        assert subscription.cancelled_at is not None
        mock_product_repo.adjust_stock.assert_called_once_with(10, 2)
        mock_uow.commit.assert_called_once()

    async def test_cancel_paused_keeps_stock(
        self, mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
    ):
        mock_subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(SubscriptionStatus.PAUSED)
        )
        use_case = CancelSubscription(
            mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
        )

        result = await use_case.execute(1)

        assert result.is_ok()
        mock_product_repo.adjust_stock.assert_not_called()

    async def test_cancel_twice_is_rejected(
        self, mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
    ):
        mock_subscription_repo.get_by_id = AsyncMock(
            return_value=make_subscription(SubscriptionStatus.CANCELLED)
        )
        use_case = CancelSubscription(
            mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
        )

        result = await use_case.execute(1)

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_ALREADY_CANCELLED"
        mock_uow.commit.assert_not_called()

    async def test_not_found(
        self, mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
    ):
        mock_subscription_repo.get_by_id = AsyncMock(return_value=None)
        use_case = CancelSubscription(
            mock_uow, mock_subscription_repo, mock_order_repo, mock_product_repo
        )

        result = await use_case.execute(99)

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_FOUND"
