from .catalog import (
    ActionResult,
    BrandCreate,
    BrandRead,
    CategoryCreate,
    CategoryRead,
    DiscountRange,
    FilterOptions,
    PriceSlider,
    ProductCreate,
    ProductDetail,
    ProductFilters,
    ProductForm,
    ProductListResponse,
    ProductRead,
    ProductUpdate,
    SelectedFilters,
    SelectOption,
)
from .common import SystemHealth

__all__ = [
    "ActionResult",
    "BrandCreate",
    "BrandRead",
    "CategoryCreate",
    "CategoryRead",
    "DiscountRange",
    "FilterOptions",
    "PriceSlider",
    "ProductCreate",
    "ProductDetail",
    "ProductFilters",
    "ProductForm",
    "ProductListResponse",
    "ProductRead",
    "ProductUpdate",
    "SelectedFilters",
    "SelectOption",
    "SystemHealth",
]
