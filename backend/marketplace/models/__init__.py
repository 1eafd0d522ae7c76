from marketplace.core.database import Base
from marketplace.models.admin_user import AdminUser
from marketplace.models.category import Category
from marketplace.models.policy import Policy
from marketplace.models.geo import City, Country, State
from marketplace.models.fee import Fee, FeeType, RecordStatus
from marketplace.models.fee_detail import FeeDetail, FeeSide
from marketplace.models.fee_location import FeeLocation
from marketplace.models.fee_to_fee_detail import FeeToFeeDetail
from marketplace.models.fee_category_link import FeeCategoryLink

__all__ = [
    "Base",
    "AdminUser",
    "Category",
    "Policy",
    "Country",
    "State",
    "City",
    "Fee",
    "FeeType",
    "RecordStatus",
    "FeeDetail",
    "FeeSide",
    "FeeLocation",
    "FeeToFeeDetail",
    "FeeCategoryLink",
]
