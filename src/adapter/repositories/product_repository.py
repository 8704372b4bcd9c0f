"""SQLAlchemy Product Repository Implementation"""

from typing import Dict, List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.product_repository import ProductRepository
from src.domain.product import Product


class SqlAlchemyProductRepository(ProductRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        if not product_ids:
            return {}
        statement = select(Product).where(Product.id.in_(set(product_ids)))
        result = await self.session.execute(statement)
        return {product.id: product for product in result.scalars().all()}

    async def adjust_stock(self, product_id: int, delta: int) -> None:
        # Atomic increment
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + delta)
        )
        await self.session.execute(statement)
