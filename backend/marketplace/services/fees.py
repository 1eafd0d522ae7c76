"""
Fee configuration tree: Fee -> detail pairs (vendor + consumer FeeDetail) -> Location.

Every write walks the tree inside one transaction, so a failure part-way
through leaves the database as it was. Reads hydrate the ACTIVE part of the
tree for the admin dashboard and storefront.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from marketplace.core.config import settings
from marketplace.core.database import transaction
from marketplace.core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from marketplace.models.fee import Fee, FeeType, RecordStatus
from marketplace.models.fee_category_link import FeeCategoryLink
from marketplace.models.fee_detail import FeeDetail, FeeSide
from marketplace.models.fee_location import FeeLocation
from marketplace.models.fee_to_fee_detail import FeeToFeeDetail
from marketplace.schemas.fees import (
    ChargeFields,
    FeeCreate,
    FeeDetailPatch,
    FeeSideCreate,
    FeeUpdate,
    LocationSpec,
)

logger = logging.getLogger(__name__)

CHARGE_FIELDS = set(ChargeFields.model_fields)


def _menu_taken(db: Session, menu_id: Optional[int], exclude_fee_id: Optional[int] = None) -> bool:
    if menu_id is None:
        return False
    q = db.query(Fee.id).filter(Fee.menu_id == menu_id, Fee.status != RecordStatus.DELETE)
    if exclude_fee_id is not None:
        q = q.filter(Fee.id != exclude_fee_id)
    return q.first() is not None


def _create_side(db: Session, fee: Fee, side: FeeSide, spec: FeeSideCreate) -> FeeDetail:
    """Location first (scoped sides only), then the detail that owns it."""
    location = None
    if not spec.is_global:
        location = FeeLocation(fee_id=fee.id, side=side, **spec.location.model_dump())
        db.add(location)
        db.flush()
    detail = FeeDetail(
        fee_id=fee.id,
        side=side,
        is_global=spec.is_global,
        location=location,
        **spec.model_dump(include=CHARGE_FIELDS),
    )
    db.add(detail)
    db.flush()
    return detail


def _apply_charges(detail: FeeDetail, spec: ChargeFields) -> None:
    # Only fields present in the request; an explicit 0 is a real value
    for field, value in spec.model_dump(include=CHARGE_FIELDS, exclude_unset=True).items():
        setattr(detail, field, value)


def _apply_scope(db: Session, detail: FeeDetail, is_global: bool, location: Optional[LocationSpec]) -> None:
    if is_global:
        if detail.location is not None:
            owned = detail.location
            detail.location = None
            db.delete(owned)
        detail.is_global = True
        return

    if location is not None:
        if detail.location is None:
            detail.location = FeeLocation(fee_id=detail.fee_id, side=detail.side, **location.model_dump())
        else:
            for field, value in location.model_dump(exclude_unset=True).items():
                setattr(detail.location, field, value)
    elif detail.location is None:
        raise ValidationError(
            f"location is required to scope {detail.side.value} detail {detail.id}",
        )
    detail.is_global = False


def _apply_scope_change(
    db: Session,
    detail: FeeDetail,
    is_global: Optional[bool],
    location: Optional[LocationSpec],
) -> None:
    """Scope changes only when asked for; a location on its own scopes the detail."""
    if is_global is None and location is None:
        return
    if is_global is None:
        is_global = False
    _apply_scope(db, detail, is_global, None if is_global else location)


def _get_fee_side(db: Session, fee_id: int, detail_id: int, side: FeeSide) -> FeeDetail:
    detail = db.query(FeeDetail).filter(FeeDetail.id == detail_id, FeeDetail.fee_id == fee_id).first()
    if not detail:
        raise NotFoundError(f"FeeDetail with ID {detail_id} not found for fee {fee_id}.")
    if detail.side != side:
        raise ValidationError(f"FeeDetail {detail_id} is a {detail.side.value} detail, not {side.value}.")
    return detail


def _detail_with_location(relationship_attr):
    return (
        selectinload(relationship_attr.and_(FeeDetail.status == RecordStatus.ACTIVE))
        .selectinload(FeeDetail.location.and_(FeeLocation.status == RecordStatus.ACTIVE))
        .options(
            selectinload(FeeLocation.country),
            selectinload(FeeLocation.state),
            selectinload(FeeLocation.city),
        )
    )


def _fee_tree_options() -> list:
    return [
        selectinload(Fee.policy),
        selectinload(Fee.pairings.and_(FeeToFeeDetail.status == RecordStatus.ACTIVE)).options(
            _detail_with_location(FeeToFeeDetail.vendor_detail),
            _detail_with_location(FeeToFeeDetail.consumer_detail),
        ),
    ]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def create_fee_tree(db: Session, body: FeeCreate) -> Fee:
    """
    Create a fee with all of its detail pairs.

    Per pair: vendor location (if scoped) -> vendor detail -> consumer
    location (if scoped) -> consumer detail -> pairing row. The returned
    fee is not re-hydrated; callers use get_fee for the full tree.
    """
    if not (body.name or "").strip() or not body.detail_pairs:
        raise ValidationError("name and detailPairs are required.")

    with transaction(db, "createFees"):
        if _menu_taken(db, body.menu_id):
            raise ConflictError()

        fee = Fee(
            name=body.name,
            description=body.description,
            policy_id=body.policy,
            fee_type=body.fee_type or FeeType.NONGLOBAL,
            menu_id=body.menu_id,
        )
        db.add(fee)
        db.flush()

        for pair in body.detail_pairs:
            vendor = _create_side(db, fee, FeeSide.VENDOR, pair.vendor)
            consumer = _create_side(db, fee, FeeSide.CONSUMER, pair.consumer)
            db.add(
                FeeToFeeDetail(
                    fee_id=fee.id,
                    vendor_detail_id=vendor.id,
                    consumer_detail_id=consumer.id,
                )
            )
        db.flush()

    db.refresh(fee)
    logger.info("Fee %s created with %d detail pair(s)", fee.id, len(body.detail_pairs))
    return fee


def update_fee_tree(db: Session, body: FeeUpdate) -> tuple[Fee, int]:
    """
    Update a fee and the detail pairs it already has.

    Sides without ``feeDetailId`` are skipped rather than created; the
    number skipped is returned with the fee.
    """
    if body.fee_id is None:
        raise ValidationError("feeId is required.")

    fields = body.model_fields_set
    skipped = 0
    with transaction(db, "updateFees"):
        fee = db.query(Fee).filter(Fee.id == body.fee_id).first()
        if not fee:
            raise NotFoundError(f"Fee with ID {body.fee_id} not found.")
        if "menu_id" in fields and _menu_taken(db, body.menu_id, exclude_fee_id=fee.id):
            raise ConflictError()

        if "name" in fields:
            if not (body.name or "").strip():
                raise ValidationError("name cannot be empty.")
            fee.name = body.name
        if "description" in fields:
            fee.description = body.description
        if "policy" in fields:
            fee.policy_id = body.policy
        if "fee_type" in fields and body.fee_type is not None:
            fee.fee_type = body.fee_type
        if "menu_id" in fields:
            fee.menu_id = body.menu_id

        for pair in body.detail_pairs:
            for side, spec in ((FeeSide.VENDOR, pair.vendor), (FeeSide.CONSUMER, pair.consumer)):
                if spec is None or spec.fee_detail_id is None:
                    skipped += 1
                    logger.warning("Fee %s: %s side without feeDetailId skipped", fee.id, side.value)
                    continue
                detail = _get_fee_side(db, fee.id, spec.fee_detail_id, side)
                _apply_charges(detail, spec)
                _apply_scope_change(db, detail, spec.is_global, spec.location)
        db.flush()

    db.refresh(fee)
    logger.info("Fee %s updated (%d side(s) skipped)", fee.id, skipped)
    return fee, skipped


def update_fee_detail(db: Session, body: FeeDetailPatch) -> FeeDetail:
    """Partial update of one detail; fields for the other side are ignored."""
    if body.fee_detail_id is None:
        raise ValidationError("feeDetailId is required.")

    with transaction(db, "updateFeesDetail"):
        detail = db.query(FeeDetail).filter(FeeDetail.id == body.fee_detail_id).first()
        if not detail:
            raise NotFoundError(f"FeeDetail with ID {body.fee_detail_id} not found.")

        if detail.side == FeeSide.VENDOR:
            patch, other = body.vendor_fields, body.consumer_fields
        else:
            patch, other = body.consumer_fields, body.vendor_fields
        if other is not None:
            logger.warning(
                "FeeDetail %s is %s; fields for the other side ignored",
                detail.id,
                detail.side.value,
            )
        if patch is None:
            raise ValidationError(f"No fields supplied for {detail.side.value} detail {detail.id}.")

        _apply_charges(detail, patch)
        _apply_scope_change(db, detail, patch.is_global, patch.location)
        db.flush()

    db.refresh(detail)
    logger.info("FeeDetail %s updated", detail.id)
    return detail


def delete_fee_tree(db: Session, fee_id: int) -> dict:
    """Hard-delete a fee and everything under it. Returns per-table row counts."""
    with transaction(db, "deleteFees"):
        if not db.query(Fee.id).filter(Fee.id == fee_id).first():
            raise NotFoundError(f"Fee with ID {fee_id} not found.")

        pairings = db.query(FeeToFeeDetail).filter(FeeToFeeDetail.fee_id == fee_id).delete(synchronize_session=False)
        details = db.query(FeeDetail).filter(FeeDetail.fee_id == fee_id).delete(synchronize_session=False)
        locations = db.query(FeeLocation).filter(FeeLocation.fee_id == fee_id).delete(synchronize_session=False)
        category_links = db.query(FeeCategoryLink).filter(FeeCategoryLink.fee_id == fee_id).delete(
            synchronize_session=False
        )
        db.query(Fee).filter(Fee.id == fee_id).delete(synchronize_session=False)

    logger.info(
        "Fee %s deleted: %d pairing(s), %d detail(s), %d location(s), %d category link(s)",
        fee_id,
        pairings,
        details,
        locations,
        category_links,
    )
    return {
        "fee_id": fee_id,
        "pairings": pairings,
        "details": details,
        "locations": locations,
        "category_links": category_links,
    }


def delete_pairing(db: Session, pairing_id: int) -> dict:
    """Remove one vendor+consumer pair (and their locations); the fee and other pairs stay."""
    with transaction(db, "deleteLocation"):
        pairing = (
            db.query(FeeToFeeDetail)
            .options(
                selectinload(FeeToFeeDetail.vendor_detail).selectinload(FeeDetail.location),
                selectinload(FeeToFeeDetail.consumer_detail).selectinload(FeeDetail.location),
            )
            .filter(FeeToFeeDetail.id == pairing_id)
            .first()
        )
        if not pairing:
            raise NotFoundError(f"FeeToFeeDetail with ID {pairing_id} not found.")

        fee_id = pairing.fee_id
        details = [d for d in (pairing.vendor_detail, pairing.consumer_detail) if d is not None]
        locations = sum(1 for d in details if d.location is not None)
        db.delete(pairing)
        for detail in details:
            # cascades to the owned location
            db.delete(detail)
        db.flush()

    logger.info("Pairing %s removed from fee %s", pairing_id, fee_id)
    return {
        "pairing_id": pairing_id,
        "fee_id": fee_id,
        "details": len(details),
        "locations": locations,
    }


def list_fees(
    db: Session,
    page: Optional[int] = 1,
    page_size: Optional[int] = None,
    search_term: Optional[str] = None,
) -> tuple[list[Fee], int]:
    """ACTIVE fees, newest first. Search terms shorter than the minimum are ignored."""
    page = page if page and page > 0 else 1
    page_size = page_size if page_size and page_size > 0 else settings.FEES_DEFAULT_PAGE_SIZE
    term = search_term or ""

    try:
        query = db.query(Fee).filter(Fee.status == RecordStatus.ACTIVE)
        if len(term) >= settings.FEES_SEARCH_MIN_LENGTH:
            query = query.filter(Fee.name.ilike(f"%{_escape_like(term)}%", escape="\\"))
        total = query.count()
        fees = (
            query.options(*_fee_tree_options())
            .order_by(Fee.created_at.desc(), Fee.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Database error during getAllFees")
        raise PersistenceError("Error in getAllFees", detail=str(e)) from e
    return fees, total


def get_fee(db: Session, fee_id: Optional[int]) -> Fee:
    if fee_id is None:
        raise ValidationError("feeId is required.")
    try:
        fee = (
            db.query(Fee)
            .options(
                *_fee_tree_options(),
                selectinload(Fee.category_links).selectinload(FeeCategoryLink.category),
            )
            .filter(Fee.id == fee_id, Fee.status == RecordStatus.ACTIVE)
            .first()
        )
    except SQLAlchemyError as e:
        logger.exception("Database error during getOneFees")
        raise PersistenceError("Error in getOneFees", detail=str(e)) from e
    if not fee:
        raise NotFoundError()
    return fee
