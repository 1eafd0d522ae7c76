import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from marketplace.core.database import transaction
from marketplace.core.exceptions import NotFoundError, ValidationError
from marketplace.models.fee import Fee
from marketplace.models.fee_category_link import FeeCategoryLink
from marketplace.schemas.fees import CategoryEntry, FeeCategoryLinkResponse

logger = logging.getLogger(__name__)


def get_or_create_category_link(
    db: Session,
    fee_id: int,
    category_id: int,
    category_location: Optional[str] = None,
) -> tuple[FeeCategoryLink, bool]:
    """Find the (fee, category) link or create it. Returns (link, created)."""
    link = (
        db.query(FeeCategoryLink)
        .filter(FeeCategoryLink.fee_id == fee_id, FeeCategoryLink.category_id == category_id)
        .first()
    )
    if link:
        return link, False
    link = FeeCategoryLink(fee_id=fee_id, category_id=category_id, category_location=category_location)
    db.add(link)
    db.flush()
    return link, True


def add_categories(db: Session, fee_id: Optional[int], entries: Iterable[CategoryEntry]) -> list[FeeCategoryLink]:
    """Link categories to a fee. Existing links are left alone; only new ones are returned."""
    if fee_id is None:
        raise ValidationError("feeId is required.")

    created = []
    with transaction(db, "addCategoryToFees"):
        if not db.query(Fee.id).filter(Fee.id == fee_id).first():
            raise NotFoundError(f"Fee with ID {fee_id} not found.")
        for entry in entries:
            link, is_new = get_or_create_category_link(db, fee_id, entry.category_id, entry.category_location)
            if is_new:
                created.append(link)

    logger.info("Fee %s: %d category link(s) created", fee_id, len(created))
    return created


def remove_category(db: Session, link_id: int) -> FeeCategoryLinkResponse:
    """Delete one link by id; returns what was removed."""
    with transaction(db, "deleteCategoryToFees"):
        link = db.query(FeeCategoryLink).filter(FeeCategoryLink.id == link_id).first()
        if not link:
            raise NotFoundError()
        removed = FeeCategoryLinkResponse.model_validate(link)
        db.delete(link)

    logger.info("Category link %s removed from fee %s", link_id, removed.fee_id)
    return removed
