"""Integration tests for subscription, order and product repositories"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from src.adapter.repositories.product_repository import SqlAlchemyProductRepository
from src.adapter.repositories.subscription_order_repository import SqlAlchemySubscriptionOrderRepository
from src.adapter.repositories.subscription_repository import SqlAlchemySubscriptionRepository
from src.domain.product import Product
from src.domain.subscription import SubscriptionStatus
from src.domain.subscription_order import SubscriptionOrder, SubscriptionOrderItem, OrderStatus
from tests.fixtures.subscription_factory import create_product, create_subscription


def make_order(subscription_id, delivery_date, number, status=OrderStatus.PENDING, customer_id="cust_123"):
    return SubscriptionOrder(
        order_number=number,
        subscription_id=subscription_id,
        customer_id=customer_id,
        distributor_id="dist_456",
        status=status,
        delivery_date=delivery_date,
        total_amount=Decimal("10"),
    )


@pytest.mark.asyncio
class TestDueSubscriptionQuery:

    async def test_selects_only_active_due_subscriptions(self, db_session):
        """
        Given: Subscriptions that are due, not yet due, paused, ended and unscheduled
        When: Due subscriptions are queried for 2024-01-10
        Then: Only active ones with next_delivery_date <= as_of and end_date >= as_of
        """
        milk = await create_product(db_session, "Toned Milk 1L", "10")
        due = await create_subscription(db_session, [(milk, 1)], next_delivery_date=date(2024, 1, 5))
        due_today = await create_subscription(db_session, [(milk, 1)], next_delivery_date=date(2024, 1, 10))
        ends_today = await create_subscription(
            db_session, [(milk, 1)], next_delivery_date=date(2024, 1, 10), end_date=date(2024, 1, 10)
        )
        await create_subscription(db_session, [(milk, 1)], next_delivery_date=date(2024, 1, 11))
        await create_subscription(db_session, [(milk, 1)], status=SubscriptionStatus.PAUSED)
        await create_subscription(
            db_session, [(milk, 1)], next_delivery_date=date(2024, 1, 5), end_date=date(2024, 1, 9)
        )
        unscheduled = await create_subscription(db_session, [(milk, 1)])
        unscheduled.next_delivery_date = None
        db_session.add(unscheduled)
        await db_session.commit()

        repo = SqlAlchemySubscriptionRepository(db_session)
        result = await repo.get_due_subscriptions(date(2024, 1, 10))

        assert [s.id for s in result] == [due.id, due_today.id, ends_today.id]

    async def test_create_attaches_items(self, db_session):
        milk = await create_product(db_session, "Toned Milk 1L", "10")
        subscription = await create_subscription(db_session, [(milk, 2)])

        repo = SqlAlchemySubscriptionRepository(db_session)
        items = await repo.get_items(subscription.id)

        assert len(items) == 1
        assert items[0].line_total == Decimal("20")


@pytest.mark.asyncio
class TestSubscriptionOrderRepository:

    async def test_one_order_per_subscription_and_date(self, db_session):
        """Test that the unique index rejects a second order for the same delivery date"""
        milk = await create_product(db_session, "Toned Milk 1L", "10")
        subscription = await create_subscription(db_session, [(milk, 1)])
        repo = SqlAlchemySubscriptionOrderRepository(db_session)

        await repo.create(make_order(subscription.id, date(2024, 1, 1), "SUB-A"), [])
        await db_session.commit()

        with pytest.raises(IntegrityError):
            await repo.create(make_order(subscription.id, date(2024, 1, 1), "SUB-B"), [])
        await db_session.rollback()

    async def test_create_links_items(self, db_session):
        milk = await create_product(db_session, "Toned Milk 1L", "10")
        subscription = await create_subscription(db_session, [(milk, 1)])
        repo = SqlAlchemySubscriptionOrderRepository(db_session)

        order = await repo.create(
            make_order(subscription.id, date(2024, 1, 1), "SUB-A"),
            [SubscriptionOrderItem(product_id=milk.id, product_name="Toned Milk 1L", quantity=1,
                                   unit_price=Decimal("10"), unit="litre", line_total=Decimal("10"))],
        )
        await db_session.commit()

        items = await repo.get_items(order.id)
        assert [i.order_id for i in items] == [order.id]
        assert await repo.list_ids_by_subscription(subscription.id) == [order.id]
        found = await repo.get_by_subscription_and_date(subscription.id, date(2024, 1, 1))
        assert found.id == order.id

    async def test_list_filters_and_ordering(self, db_session):
        milk = await create_product(db_session, "Toned Milk 1L", "10")
        subscription = await create_subscription(db_session, [(milk, 1)])
        repo = SqlAlchemySubscriptionOrderRepository(db_session)
        for day, number, status in [
            (1, "SUB-1", OrderStatus.DELIVERED),
            (8, "SUB-8", OrderStatus.PENDING),
            (15, "SUB-15", OrderStatus.PENDING),
        ]:
            await repo.create(make_order(subscription.id, date(2024, 1, day), number, status), [])
        await db_session.commit()

        pending = await repo.list(status=OrderStatus.PENDING)
        ranged = await repo.list(date_from=date(2024, 1, 2), date_to=date(2024, 1, 14))
        paged = await repo.list(subscription_id=subscription.id, limit=1, offset=1)
        other_customer = await repo.list(customer_id="someone_else")

        assert [o.order_number for o in pending] == ["SUB-15", "SUB-8"]
        assert [o.order_number for o in ranged] == ["SUB-8"]
        assert [o.order_number for o in paged] == ["SUB-8"]
        assert other_customer == []

    async def test_generated_order_numbers_do_not_collide(self, db_session):
        repo = SqlAlchemySubscriptionOrderRepository(db_session, order_number_prefix="DAIRY")
        now = datetime(2024, 1, 1, 6, 30)

        numbers = {repo.generate_order_number(1, now) for _ in range(50)}

        assert len(numbers) == 50
        assert all(n.startswith("DAIRY-20240101063000000000-1-") for n in numbers)


@pytest.mark.asyncio
class TestProductRepository:

    async def test_adjust_stock(self, db_session, session_factory):
        product = await create_product(db_session, "Toned Milk 1L", "10", quantity=10)
        await db_session.commit()
        repo = SqlAlchemyProductRepository(db_session)

        await repo.adjust_stock(product.id, -3)
        await repo.adjust_stock(product.id, 1)
        await db_session.commit()

        async with session_factory() as session:
            reloaded = await session.get(Product, product.id)
        assert reloaded.quantity == 8

    async def test_get_by_ids_ignores_unknown(self, db_session):
        product = await create_product(db_session, "Toned Milk 1L", "10")
        await db_session.commit()

        products = await SqlAlchemyProductRepository(db_session).get_by_ids([product.id, 999])

        assert list(products) == [product.id]
