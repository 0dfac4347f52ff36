from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DECIMAL, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:  # pragma: no cover
    from .category import ProductCategory
    from .feedback import Comment, Review


LIST_SEPARATOR = ","


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    old_price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2))
    discount: Mapped[int] = mapped_column(Integer, default=0)
    price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), index=True)
    rating: Mapped[Decimal] = mapped_column(DECIMAL(3, 1), default=Decimal("0"))
    colors: Mapped[str] = mapped_column(String(255), default="")
    # ordered brand ids, e.g. "3,1"
    brands: Mapped[str] = mapped_column(String(500), default="")
    gender: Mapped[str] = mapped_column(String(16), index=True)
    # occasion values, e.g. "casual,party"
    occasion: Mapped[str] = mapped_column(String(255), default="")
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    category_links: Mapped[list["ProductCategory"]] = relationship(
        "ProductCategory", back_populates="product"
    )
    reviews: Mapped[list["Review"]] = relationship("Review", back_populates="product")
    comments: Mapped[list["Comment"]] = relationship("Comment", back_populates="product")

    @property
    def brand_ids(self) -> list[int]:
        return [int(token) for token in split_tokens(self.brands)]

    @brand_ids.setter
    def brand_ids(self, value: list[int]) -> None:
        self.brands = join_tokens(str(brand_id) for brand_id in value)

    @property
    def occasions(self) -> list[str]:
        return split_tokens(self.occasion)

    @occasions.setter
    def occasions(self, value: list[str]) -> None:
        self.occasion = join_tokens(value)


def split_tokens(value: str | None) -> list[str]:
    if not value:
        return []
    return [token.strip() for token in value.split(LIST_SEPARATOR) if token.strip()]


def join_tokens(values) -> str:
    return LIST_SEPARATOR.join(str(getattr(value, "value", value)).strip() for value in values)
