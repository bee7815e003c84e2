"""Test factories for Merse models."""

from .base import AsyncSQLAlchemyModelFactory
from .api_keys import ApiKeyFactory
from .credits import CreditUsageFactory, UserCreditProfileFactory
from .projects import SiteProjectFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "ApiKeyFactory",
    "CreditUsageFactory",
    "UserCreditProfileFactory",
    "SiteProjectFactory",
]
