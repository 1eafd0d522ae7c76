from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from marketplace.models.fee import FeeType, RecordStatus
from marketplace.models.fee_detail import FeeSide
from marketplace.schemas.common import CamelModel


# --- Requests ---


class LocationSpec(CamelModel):
    country_id: Optional[int] = None
    state_id: Optional[int] = None
    city_id: Optional[int] = None
    town: Optional[str] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.country_id, self.state_id, self.city_id, self.town))


def _check_location(is_global: Optional[bool], location: Optional[LocationSpec]) -> Optional[LocationSpec]:
    """Global sides drop their location; a scoped one must narrow by at least one field."""
    if is_global:
        return None
    if location is not None and location.is_empty():
        raise ValueError("location needs at least one of countryId, stateId, cityId, town")
    return location


class ChargeFields(CamelModel):
    percentage: Optional[float] = None
    max_cap_per_deal: Optional[float] = None
    max_cap_per_month: Optional[float] = None
    fix_fee: Optional[float] = None
    vat: Optional[float] = None
    payment_gateway_fee: Optional[float] = None


class FeeSideCreate(ChargeFields):
    """
    One side of a detail pair.

    Either global (no location) or scoped to exactly one location; a
    location sent alongside ``isGlobal: true`` is discarded.
    """

    is_global: bool = False
    location: Optional[LocationSpec] = None

    @model_validator(mode="after")
    def check_scope(self):
        self.location = _check_location(self.is_global, self.location)
        if not self.is_global and self.location is None:
            raise ValueError("location is required when isGlobal is false")
        return self


class FeeSideUpdate(ChargeFields):
    """
    Side of an existing pair. Without ``feeDetailId`` the side is skipped.

    Omitting both ``isGlobal`` and ``location`` leaves the scope as it is;
    a location on its own scopes the detail.
    """

    fee_detail_id: Optional[int] = None
    is_global: Optional[bool] = None
    location: Optional[LocationSpec] = None

    @model_validator(mode="after")
    def check_scope(self):
        self.location = _check_location(self.is_global, self.location)
        return self


class FeeSidePatch(ChargeFields):
    is_global: Optional[bool] = None
    location: Optional[LocationSpec] = None

    @model_validator(mode="after")
    def check_scope(self):
        self.location = _check_location(self.is_global, self.location)
        return self


class DetailPairCreate(CamelModel):
    vendor: FeeSideCreate
    consumer: FeeSideCreate


class DetailPairUpdate(CamelModel):
    vendor: Optional[FeeSideUpdate] = None
    consumer: Optional[FeeSideUpdate] = None


class FeeCreate(CamelModel):
    # Required fields are checked by the service so the caller gets an envelope, not a 422
    name: Optional[str] = None
    description: Optional[str] = None
    policy: Optional[int] = None
    fee_type: Optional[FeeType] = Field(default=None, alias="type")
    menu_id: Optional[int] = None
    detail_pairs: list[DetailPairCreate] = []


class FeeUpdate(CamelModel):
    fee_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    policy: Optional[int] = None
    fee_type: Optional[FeeType] = Field(default=None, alias="type")
    menu_id: Optional[int] = None
    detail_pairs: list[DetailPairUpdate] = []


class FeeDetailPatch(CamelModel):
    fee_detail_id: Optional[int] = None
    vendor_fields: Optional[FeeSidePatch] = None
    consumer_fields: Optional[FeeSidePatch] = None


class CategoryEntry(CamelModel):
    category_id: int
    category_location: Optional[str] = None


class FeeCategoriesAdd(CamelModel):
    fee_id: Optional[int] = None
    category_entries: list[CategoryEntry] = []


# --- Responses ---


class NamedRef(CamelModel):
    id: int
    name: str


class PolicyRef(CamelModel):
    id: int
    title: str


class FeeLocationResponse(CamelModel):
    id: int
    side: FeeSide
    country_id: Optional[int] = None
    state_id: Optional[int] = None
    city_id: Optional[int] = None
    town: Optional[str] = None
    country: Optional[NamedRef] = None
    state: Optional[NamedRef] = None
    city: Optional[NamedRef] = None


class FeeDetailResponse(ChargeFields):
    id: int
    fee_id: int
    side: FeeSide
    is_global: bool
    location_id: Optional[int] = None
    location: Optional[FeeLocationResponse] = None


class FeePairingResponse(CamelModel):
    id: int
    fee_id: int
    status: RecordStatus
    vendor_detail: Optional[FeeDetailResponse] = None
    consumer_detail: Optional[FeeDetailResponse] = None


class FeeCategoryLinkResponse(CamelModel):
    id: int
    fee_id: int
    category_id: int
    category_location: Optional[str] = None
    category: Optional[NamedRef] = None


class FeeSummaryResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    policy_id: Optional[int] = None
    fee_type: FeeType = Field(alias="type")
    menu_id: Optional[int] = None
    status: RecordStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FeeResponse(FeeSummaryResponse):
    policy: Optional[PolicyRef] = None
    pairings: list[FeePairingResponse] = []


class FeeDetailedResponse(FeeResponse):
    category_links: list[FeeCategoryLinkResponse] = []


class FeeUpdateResult(CamelModel):
    fee: FeeSummaryResponse
    skipped_sides: int = 0


class FeeDeleteResult(CamelModel):
    fee_id: int
    pairings: int
    details: int
    locations: int
    category_links: int


class PairingDeleteResult(CamelModel):
    pairing_id: int
    fee_id: int
    details: int
    locations: int
