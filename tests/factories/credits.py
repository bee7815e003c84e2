"""Factories for credit profiles and usage records."""

import factory

from merse.database.models import CreditUsage, UsageStatus, UserCreditProfile
from merse.modules.billing.plans import PlanKey
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class UserCreditProfileFactory(AsyncSQLAlchemyModelFactory[UserCreditProfile]):
    class Meta:
        model = UserCreditProfile

    user_id = factory.Sequence(lambda n: f"user-{n}")
    plan = PlanKey.FREE.value
    credits = 300
    generated_count = 0


class CreditUsageFactory(AsyncSQLAlchemyModelFactory[CreditUsage]):
    class Meta:
        model = CreditUsage

    id = UUIDFactory()
    user_id = factory.Sequence(lambda n: f"user-{n}")
    product = "image"
    amount = factory.Faker("random_int", min=1, max=50)
    status = UsageStatus.DEBITED.value
    usage_metadata = factory.LazyFunction(dict)
