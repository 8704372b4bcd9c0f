"""Product Domain Entity

Catalog entry referenced by subscriptions. The catalog is maintained
elsewhere; this service reads names and prices and adjusts stock.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Integer, Numeric, String
from src.domain.base import BaseModel, IdType


class Product(BaseModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique product identifier (auto-increment)"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Display name"
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Current unit price"
    )

    unit: str = Field(
        default="piece",
        sa_column=Column(String(20), nullable=False, default="piece"),
        description="Unit of measure"
    )

    quantity: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Units in stock"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
