"""Database models for the Merse credits core."""

from .api_keys import ApiKey
from .base import Base
from .credits import CreditUsage, UsageStatus, UserCreditProfile
from .projects import EventLevel, SiteProject, SiteProjectEvent, SiteStatus

__all__ = [
    # Base
    "Base",
    # Enums
    "UsageStatus",
    "SiteStatus",
    "EventLevel",
    # Models
    "ApiKey",
    "UserCreditProfile",
    "CreditUsage",
    "SiteProject",
    "SiteProjectEvent",
]
