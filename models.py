"""
Data models for the SKU Specification Resolution Service.
All models use Pydantic for validation and static typing.
"""

from enum import Enum
from typing import Optional, Dict, List, Union
from pydantic import BaseModel, Field, field_validator, model_validator

from config import settings


class ResolutionMode(str, Enum):
    """Which resolution strategy a product uses"""
    STRUCTURED = "STRUCTURED"
    LEGACY = "LEGACY"


class SessionState(str, Enum):
    """Resolution session lifecycle states"""
    OPEN = "OPEN"
    CONFIRMED = "CONFIRMED"
    CLOSED = "CLOSED"


class PurchaseStatus(str, Enum):
    """State of the confirm button, in priority order"""
    OUT_OF_STOCK = "OUT_OF_STOCK"
    SELECT_SPECS = "SELECT_SPECS"
    SPEC_UNAVAILABLE = "SPEC_UNAVAILABLE"
    READY = "READY"


class ResolutionError(Exception):
    """Base class for errors raised at the session boundary"""


class InvalidSelectionError(ResolutionError):
    """Selection names a dimension or value the product does not have"""


class ModeMismatchError(ResolutionError):
    """Structured and legacy operations mixed within one session"""


class SessionClosedError(ResolutionError):
    """Session was confirmed or closed and no longer accepts changes"""


# Catalog snapshot models (supplied by the data layer)
class SpecValue(BaseModel):
    """One selectable option within a dimension"""
    id: int
    value: str
    image: Optional[str] = None


class SpecDimension(BaseModel):
    """One axis of variation, e.g. Color"""
    id: int
    name: str
    values: List[SpecValue] = Field(..., min_length=1)

    def find_value(self, value_id: int) -> Optional[SpecValue]:
        for item in self.values:
            if item.id == value_id:
                return item
        return None


class Variant(BaseModel):
    """One concrete purchasable combination (SKU)"""
    id: int
    variant_key: Union[List[int], str, None] = None  # [1, 3] or "1,3"
    price: float
    score_price: Optional[float] = None
    stock: int = Field(..., ge=0)
    image: Optional[str] = None
    variant_label: Optional[str] = None  # e.g. "Red / L"


class PriceRange(BaseModel):
    """Inclusive min/max bounds for an amount"""
    min: float
    max: float

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min > self.max:
            raise ValueError("price range min must not exceed max")
        return self


class LegacySpec(BaseModel):
    """Flat name/value spec used by products without structured variants"""
    name: str
    values: List[str] = Field(default_factory=list)


class ProductSnapshot(BaseModel):
    """Read-only product data for the duration of a resolution session"""
    name: Optional[str] = None
    price: float = 0.0
    score_price: float = 0.0
    green_power_amount: float = 0.0  # flat add-on amounts shown on the price line
    balance_amount: float = 0.0
    stock: int = Field(0, ge=0)
    image: Optional[str] = None
    max_purchase: int = Field(default_factory=lambda: settings.DEFAULT_MAX_PURCHASE, ge=1)
    has_structured_variants: bool = False  # advisory only
    dimensions: List[SpecDimension] = Field(default_factory=list)
    variants: List[Variant] = Field(default_factory=list)
    price_range: Optional[PriceRange] = None
    legacy_specs: List[LegacySpec] = Field(default_factory=list)

    @field_validator("dimensions")
    @classmethod
    def dimension_ids_unique(cls, v: List[SpecDimension]) -> List[SpecDimension]:
        seen = set()
        for dimension in v:
            if dimension.id in seen:
                raise ValueError(f"duplicate dimension id {dimension.id}")
            seen.add(dimension.id)
        return v


# Derived display models
class AmountDisplay(BaseModel):
    """Either an exact amount or a min-max range, plus its plain rendering"""
    amount: Optional[float] = None
    price_range: Optional[PriceRange] = None
    text: str = ""


class ValueHint(BaseModel):
    """Price hint shown on a grid-style value chip"""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    image: Optional[str] = None
    is_score_price: bool = False
    text: str = ""


class ValueChip(BaseModel):
    value_id: int
    label: str
    selected: bool = False
    selectable: bool = True
    hint: Optional[ValueHint] = None


class DimensionView(BaseModel):
    dimension_id: int
    name: str
    grid_mode: bool = False
    chips: List[ValueChip] = Field(default_factory=list)


class ThumbnailOption(BaseModel):
    """Entry of the thumbnail strip under the product gallery"""
    variant_id: Optional[int] = None
    label: str
    image: str
    available: bool
    selection: Dict[int, int] = Field(default_factory=dict)


class LegacyDimensionView(BaseModel):
    name: str
    values: List[str]
    selected: Optional[str] = None


class SessionView(BaseModel):
    """Everything the presentation layer renders for the current selection"""
    mode: ResolutionMode
    state: SessionState
    selection: Dict[int, int] = Field(default_factory=dict)
    legacy_selection: Dict[str, str] = Field(default_factory=dict)
    matched_variant_id: Optional[int] = None
    price: AmountDisplay
    score_price: AmountDisplay
    green_power_amount: float = 0.0
    balance_amount: float = 0.0
    is_free: bool = False
    stock: int
    image: Optional[str] = None
    summary_text: str = ""
    summary_map: Optional[Dict[str, str]] = None
    quantity: int
    max_quantity: int
    all_selected: bool
    can_buy: bool
    purchase_status: PurchaseStatus
    dimensions: List[DimensionView] = Field(default_factory=list)
    legacy_dimensions: List[LegacyDimensionView] = Field(default_factory=list)
    thumbnails: List[ThumbnailOption] = Field(default_factory=list)


class ConfirmationPayload(BaseModel):
    """Emitted to order submission on confirm"""
    quantity: int
    spec_summary_map: Optional[Dict[str, str]] = None
    variant_id: Optional[int] = None


# API request/response models
class ResolveRequest(BaseModel):
    product: ProductSnapshot
    selection: Dict[int, int] = Field(default_factory=dict)
    legacy_selection: Dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(1, ge=1)


class SelectableRequest(BaseModel):
    product: ProductSnapshot
    selection: Dict[int, int] = Field(default_factory=dict)
    dimension_id: int
    value_id: int


class SelectableResponse(BaseModel):
    selectable: bool
