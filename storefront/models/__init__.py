from .base import Base, TimestampMixin
from .brand import Brand
from .category import Category, ProductCategory
from .enums import Gender, Occasion
from .feedback import Comment, Review
from .product import Product

__all__ = [
    "Base",
    "TimestampMixin",
    "Brand",
    "Category",
    "Comment",
    "Gender",
    "Occasion",
    "Product",
    "ProductCategory",
    "Review",
]
