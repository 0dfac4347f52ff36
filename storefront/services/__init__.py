from .catalog_service import CatalogService
from .product_query import ProductPage, ProductQueryService
from .product_service import ProductService

__all__ = [
    "CatalogService",
    "ProductPage",
    "ProductQueryService",
    "ProductService",
]
