import re
from decimal import Decimal
from typing import Annotated, Mapping, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storefront.models.enums import Gender, Occasion
from storefront.core.exceptions import ValidationError

# Upper bound of the INTEGER primary key columns.
MAX_ID = 2**31 - 1

RecordId = Annotated[int, Field(ge=1, le=MAX_ID)]

_PRICE_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DiscountRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(..., ge=0, le=100)
    max: int = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def check_bounds(self) -> "DiscountRange":
        if self.min > self.max:
            raise ValueError("discount minimum is greater than maximum")
        return self

    @classmethod
    def parse(cls, raw: str) -> "DiscountRange":
        parts = raw.split("-", 1)
        if len(parts) != 2:
            raise ValidationError(f"discount must look like 'min-max', got {raw!r}", field="discount")
        bounds = [part.strip() for part in parts]
        if not all(_is_digits(bound) for bound in bounds):
            raise ValidationError(f"discount bounds must be integers, got {raw!r}", field="discount")
        low, high = (int(bound) for bound in bounds)
        if not (0 <= low <= high <= 100):
            raise ValidationError(
                f"discount range must satisfy 0 <= min <= max <= 100, got {raw!r}", field="discount"
            )
        return cls(min=low, max=high)

    def to_query_value(self) -> str:
        return f"{self.min}-{self.max}"

    @property
    def label(self) -> str:
        return f"From {self.min}% to {self.max}%"


def _is_digits(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _blank(raw: Optional[str]) -> bool:
    return raw is None or not raw.strip().strip(",").strip()


def _split_tokens(raw: str) -> list[str]:
    seen: list[str] = []
    for token in raw.split(","):
        token = token.strip()
        if token and token not in seen:
            seen.append(token)
    return seen


def _parse_ids(raw: Optional[str], field: str) -> list[int]:
    if _blank(raw):
        return []
    ids: list[int] = []
    for token in _split_tokens(raw):
        if not _is_digits(token):
            raise ValidationError(f"{field} must be a comma-separated list of ids, got {token!r}", field=field)
        value = int(token)
        if not 1 <= value <= MAX_ID:
            raise ValidationError(f"{field} ids must be between 1 and {MAX_ID}, got {value}", field=field)
        if value not in ids:
            ids.append(value)
    return ids


class ProductFilters(BaseModel):
    """Structured listing filter rebuilt from URL query parameters on every request."""

    model_config = ConfigDict(frozen=True)

    brand_ids: list[RecordId] = Field(default_factory=list)
    price_range_to: Optional[Decimal] = Field(default=None, ge=0)
    gender: Optional[Gender] = None
    occasions: list[Occasion] = Field(default_factory=list)
    discount: Optional[DiscountRange] = None
    category_ids: list[RecordId] = Field(default_factory=list)

    @classmethod
    def from_query_params(cls, params: Mapping[str, Optional[str]]) -> "ProductFilters":
        """Normalize raw query-string values; blank values mean the filter is off."""

        price_range_to = None
        raw_price = params.get("priceRangeTo")
        if not _blank(raw_price):
            if not _PRICE_PATTERN.fullmatch(raw_price.strip()):
                raise ValidationError(
                    f"priceRangeTo must be a non-negative number, got {raw_price!r}", field="priceRangeTo"
                )
            price_range_to = Decimal(raw_price.strip())

        gender = None
        raw_gender = params.get("gender")
        if not _blank(raw_gender):
            try:
                gender = Gender(raw_gender.strip())
            except ValueError as exc:
                raise ValidationError(f"Unknown gender {raw_gender!r}", field="gender") from exc

        occasions: list[Occasion] = []
        raw_occasions = params.get("occasions")
        if not _blank(raw_occasions):
            for token in _split_tokens(raw_occasions):
                try:
                    occasions.append(Occasion(token))
                except ValueError as exc:
                    raise ValidationError(f"Unknown occasion {token!r}", field="occasions") from exc

        discount = None
        raw_discount = params.get("discount")
        if not _blank(raw_discount):
            discount = DiscountRange.parse(raw_discount.strip())

        return cls(
            brand_ids=_parse_ids(params.get("brandId"), "brandId"),
            price_range_to=price_range_to,
            gender=gender,
            occasions=occasions,
            discount=discount,
            category_ids=_parse_ids(params.get("categoryId"), "categoryId"),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.brand_ids
            or self.price_range_to is not None
            or self.gender
            or self.occasions
            or self.discount
            or self.category_ids
        )

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.brand_ids:
            params["brandId"] = ",".join(str(brand_id) for brand_id in self.brand_ids)
        if self.category_ids:
            params["categoryId"] = ",".join(str(category_id) for category_id in self.category_ids)
        if self.price_range_to is not None:
            params["priceRangeTo"] = format(self.price_range_to, "f")
        if self.gender:
            params["gender"] = self.gender.value
        if self.occasions:
            params["occasions"] = ",".join(occasion.value for occasion in self.occasions)
        if self.discount:
            params["discount"] = self.discount.to_query_value()
        return params

    def to_query_string(self) -> str:
        return urlencode(self.to_query_params(), safe=",")


def _unique(values: list) -> list:
    result = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


class ProductForm(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    old_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    discount: int = Field(default=0, ge=0, le=100)
    rating: Decimal = Field(default=Decimal("0"), ge=0, le=5)
    colors: str = Field(default="", max_length=255)
    brands: list[RecordId] = Field(default_factory=list)
    gender: Gender
    occasions: list[Occasion] = Field(default_factory=list)
    image_url: Optional[str] = Field(default=None, max_length=500)
    category_ids: list[RecordId] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("brands", "occasions", "category_ids")
    @classmethod
    def dedupe(cls, value: list) -> list:
        return _unique(value)


class ProductCreate(ProductForm):
    pass


class ProductUpdate(ProductForm):
    pass


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


class CategoryRead(CategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


class BrandRead(BrandCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ProductRead(CamelModel):
    id: int
    name: str
    description: str
    old_price: Decimal
    discount: int
    price: Decimal
    rating: Decimal
    colors: str
    brands: list[int]
    gender: str
    occasions: list[str]
    image_url: Optional[str] = None
    categories: list[str] = Field(default_factory=list)


class ProductListResponse(CamelModel):
    products: list[ProductRead]
    count: int
    last_page: int
    num_of_results_on_cur_page: int
    page: int
    page_size: int


class SelectOption(BaseModel):
    value: int | str | None
    label: Optional[str]


class ProductDetail(ProductRead):
    brand_options: list[SelectOption] = Field(default_factory=list)
    category_options: list[SelectOption] = Field(default_factory=list)


class ActionResult(CamelModel):
    """Result envelope: either a success message or an error, never both."""

    message: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    product_id: Optional[int] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "ActionResult":
        if (self.message is None) == (self.error is None):
            raise ValueError("exactly one of message or error must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, message: str, **extra) -> "ActionResult":
        return cls(message=message, **extra)

    @classmethod
    def failure(cls, error: str, error_type: str) -> "ActionResult":
        return cls(error=error, error_type=error_type)


class PriceSlider(BaseModel):
    min: int
    max: int
    step: int
    value: Decimal


class SelectedFilters(CamelModel):
    brands: list[SelectOption] = Field(default_factory=list)
    categories: list[SelectOption] = Field(default_factory=list)
    occasions: list[SelectOption] = Field(default_factory=list)
    gender: str = ""
    discount: SelectOption
    price_range_to: Decimal


class FilterOptions(CamelModel):
    brands: list[SelectOption]
    categories: list[SelectOption]
    occasions: list[SelectOption]
    genders: list[SelectOption]
    discounts: list[SelectOption]
    price_slider: PriceSlider
    selected: SelectedFilters
    query_string: str
