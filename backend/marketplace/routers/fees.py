import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.core.auth import get_current_admin
from marketplace.core.deps import get_db
from marketplace.core.exceptions import FeeServiceError
from marketplace.models.admin_user import AdminUser
from marketplace.schemas.common import ApiResponse
from marketplace.schemas.fees import (
    FeeCategoriesAdd,
    FeeCategoryLinkResponse,
    FeeCreate,
    FeeDeleteResult,
    FeeDetailedResponse,
    FeeDetailPatch,
    FeeDetailResponse,
    FeeResponse,
    FeeSummaryResponse,
    FeeUpdate,
    FeeUpdateResult,
    PairingDeleteResult,
)
from marketplace.services import fee_categories, fees

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure(e: FeeServiceError) -> ApiResponse:
    logger.info("Fee request failed: %s (%s)", e.message, type(e).__name__)
    return ApiResponse(status=False, message=e.message, error=e.detail)


@router.post("", response_model=ApiResponse[FeeSummaryResponse])
def create_fees(
    body: FeeCreate,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Create a fee with its vendor/consumer detail pairs and their locations."""
    try:
        fee = fees.create_fee_tree(db, body)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(status=True, message="Fee created successfully.", data=FeeSummaryResponse.model_validate(fee))


@router.patch("", response_model=ApiResponse[FeeUpdateResult])
def update_fees(
    body: FeeUpdate,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Update a fee and its existing detail pairs (identified by feeDetailId per side)."""
    try:
        fee, skipped = fees.update_fee_tree(db, body)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="Fee updated successfully.",
        data=FeeUpdateResult(fee=FeeSummaryResponse.model_validate(fee), skipped_sides=skipped),
    )


@router.patch("/detail", response_model=ApiResponse[FeeDetailResponse])
def update_fees_detail(
    body: FeeDetailPatch,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Partially update one fee detail; omitted fields are left unchanged."""
    try:
        detail = fees.update_fee_detail(db, body)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="FeesDetail updated successfully.",
        data=FeeDetailResponse.model_validate(detail),
    )


@router.get("", response_model=ApiResponse[list[FeeResponse]])
def get_all_fees(
    page: Optional[int] = Query(1),
    limit: Optional[int] = Query(None),
    sort: Optional[str] = Query(None, description="Accepted for compatibility; results are always newest first"),
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    db: Session = Depends(get_db),
):
    """Public: paginated ACTIVE fees with their detail pairs and locations."""
    try:
        items, total = fees.list_fees(db, page=page, page_size=limit, search_term=search_term)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="Fetched Successfully" if items else "No Fees Found",
        data=[FeeResponse.model_validate(f) for f in items],
        total_count=total,
    )


@router.get("/one", response_model=ApiResponse[FeeDetailedResponse])
def get_one_fees(
    fee_id: Optional[int] = Query(None, alias="feeId"),
    db: Session = Depends(get_db),
):
    """Public: one fee with its full tree and linked categories."""
    try:
        fee = fees.get_fee(db, fee_id)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(status=True, message="Fetch Successfully", data=FeeDetailedResponse.model_validate(fee))


@router.post("/categories", response_model=ApiResponse[list[FeeCategoryLinkResponse]])
def add_category_to_fees(
    body: FeeCategoriesAdd,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Link categories to a fee; links that already exist are skipped."""
    try:
        created = fee_categories.add_categories(db, body.fee_id, body.category_entries)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="Process completed successfully" if created else "No new connections created",
        data=[FeeCategoryLinkResponse.model_validate(link) for link in created],
    )


@router.delete("/categories/{link_id}", response_model=ApiResponse[FeeCategoryLinkResponse])
def delete_category_to_fees(
    link_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    try:
        removed = fee_categories.remove_category(db, link_id)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(status=True, message="Deleted Successfully", data=removed)


@router.delete("/pairing/{pairing_id}", response_model=ApiResponse[PairingDeleteResult])
def delete_pairing(
    pairing_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Remove one vendor+consumer detail pair; the fee and its other pairs stay."""
    try:
        result = fees.delete_pairing(db, pairing_id)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="Location fees details successfully deleted.",
        data=PairingDeleteResult(**result),
    )


@router.delete("/{fee_id}", response_model=ApiResponse[FeeDeleteResult])
def delete_fees(
    fee_id: int,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(get_current_admin),
):
    """Hard-delete a fee and all of its pairs, details, locations and category links."""
    try:
        result = fees.delete_fee_tree(db, fee_id)
    except FeeServiceError as e:
        return _failure(e)
    return ApiResponse(
        status=True,
        message="Fees and related details have been successfully deleted.",
        data=FeeDeleteResult(**result),
    )
