"""Product Repository Interface

Read access to the product catalog plus stock adjustments.
"""

from abc import ABC, abstractmethod
from typing import Dict, List
from src.domain.product import Product


class ProductRepository(ABC):

    @abstractmethod
    async def get_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        """
        Retrieve products keyed by ID

        Missing IDs are simply absent from the result.
        """
        pass

    @abstractmethod
    async def adjust_stock(self, product_id: int, delta: int) -> None:
        """
        Add delta (may be negative) to a product's stock quantity
        """
        pass
