"""
Shared API dependencies
"""

import uuid

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.exceptions import NotFoundException
from leaderboard_backend.utils.validators import BIGINT_MAX


def parse_id(value: str) -> int:
    """Numeric path IDs that cannot exist are reported as not found"""
    try:
        parsed = int(value)
    except ValueError:
        raise NotFoundException()
    if not 0 < parsed <= BIGINT_MAX:
        raise NotFoundException()
    return parsed


def parse_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise NotFoundException()


def feature_gate(flag: str):
    """Dependency factory hiding an endpoint while its feature flag is off"""

    def check_feature() -> None:
        if not getattr(settings, flag):
            raise NotFoundException()

    return check_feature


registration_enabled = feature_gate("FEATURE_ACCOUNT_REGISTRATION")
login_enabled = feature_gate("FEATURE_LOGIN")
recovery_enabled = feature_gate("FEATURE_ACCOUNT_RECOVERY")
