"""Unit tests for AdvanceSubscriptionSchedule use case"""

import pytest
from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.subscriptions.advance_schedule import AdvanceSubscriptionSchedule
from src.app.use_cases.subscriptions.dtos import AdvanceScheduleCommandDTO
from src.domain.subscription import Subscription, SubscriptionStatus, DeliveryFrequency


@pytest.fixture
def mock_subscription_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda s: s)
    return repo


@pytest.fixture
def advance_use_case(mock_uow, mock_subscription_repo):
    return AdvanceSubscriptionSchedule(uow=mock_uow, subscription_repo=mock_subscription_repo)


def make_subscription(**overrides):
    values = dict(
        id=1,
        customer_id="cust_123",
        distributor_id="dist_456",
        frequency=DeliveryFrequency.WEEKLY,
        delivery_days=["monday"],
        start_date=date(2024, 1, 1),
        status=SubscriptionStatus.ACTIVE,
        next_delivery_date=date(2024, 1, 1),
        total_deliveries=0,
    )
    values.update(overrides)
    return Subscription(**values)


def command(fulfilled=date(2024, 1, 1), now=datetime(2024, 1, 1, 6, 30)):
    return AdvanceScheduleCommandDTO(subscription_id=1, fulfilled_date=fulfilled, now=now)


@pytest.mark.asyncio
class TestAdvanceSchedule:

    async def test_moves_to_next_weekly_date(
        self, advance_use_case, mock_subscription_repo, mock_uow
    ):
        """
        Given: Weekly Monday subscription due 2024-01-01
        When: Schedule is advanced after that delivery
        Then: next_delivery_date is the following Monday and counters are updated
        """
        subscription = make_subscription()
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await advance_use_case.execute(command())

        assert result.is_ok()
        assert result.value.next_delivery_date == date(2024, 1, 8)
        assert result.value.last_delivery_date == date(2024, 1, 1)
        assert result.value.total_deliveries == 1
        assert result.value.completed is False
        mock_subscription_repo.get_by_id.assert_called_once_with(1, for_update=True)
        mock_uow.commit.assert_called_once()

    async def test_completes_when_next_date_passes_end_date(
        self, advance_use_case, mock_subscription_repo
    ):
        """
        Given: Subscription whose end_date is before the next computed date
        When: Schedule is advanced
        Then: Status completed and next_delivery_date cleared
        """
        subscription = make_subscription(end_date=date(2024, 1, 5))
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await advance_use_case.execute(command())

        assert result.is_ok()
        assert result.value.completed is True
        assert result.value.status == "completed"
        assert result.value.next_delivery_date is None
        assert result.value.total_deliveries == 1

    async def test_next_date_equal_to_end_date_stays_active(
        self, advance_use_case, mock_subscription_repo
    ):
        subscription = make_subscription(end_date=date(2024, 1, 8))
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await advance_use_case.execute(command())

        assert result.value.completed is False
        assert result.value.next_delivery_date == date(2024, 1, 8)

    async def test_paused_meanwhile_counts_delivery_only(
        self, advance_use_case, mock_subscription_repo
    ):
        """Test that a subscription paused after materialization keeps its schedule"""
        subscription = make_subscription(status=SubscriptionStatus.PAUSED)
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await advance_use_case.execute(command())

        assert result.is_ok()
        assert result.value.status == "paused"
        assert result.value.next_delivery_date == date(2024, 1, 1)
        assert result.value.total_deliveries == 1

    async def test_invalid_recurrence_leaves_progress_untouched(
        self, advance_use_case, mock_subscription_repo, mock_uow
    ):
        subscription = make_subscription(
            frequency=DeliveryFrequency.MONTHLY, delivery_day_of_month=31
        )
        mock_subscription_repo.get_by_id = AsyncMock(return_value=subscription)

        result = await advance_use_case.execute(command())

        assert result.is_err()
        assert result.error.code == "INVALID_RECURRENCE"
        assert subscription.total_deliveries == 0
        mock_subscription_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_subscription_not_found(self, advance_use_case, mock_subscription_repo):
        mock_subscription_repo.get_by_id = AsyncMock(return_value=None)

        result = await advance_use_case.execute(command())

        assert result.is_err()
        assert result.error.code == "SUBSCRIPTION_NOT_FOUND"

    async def test_update_error_rolls_back(
        self, advance_use_case, mock_subscription_repo, mock_uow
    ):
        mock_subscription_repo.get_by_id = AsyncMock(return_value=make_subscription())
        mock_subscription_repo.update = AsyncMock(side_effect=Exception("Lock timeout"))

        result = await advance_use_case.execute(command())

        assert result.is_err()
        assert result.error.code == "ADVANCE_SCHEDULE_FAILED"
        mock_uow.rollback.assert_called_once()
