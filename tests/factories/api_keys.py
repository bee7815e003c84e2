"""Factory for ApiKey models."""

import factory

from merse.database.models import ApiKey
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class ApiKeyFactory(AsyncSQLAlchemyModelFactory[ApiKey]):
    """Factory for creating ApiKey instances."""

    class Meta:
        model = ApiKey

    id = UUIDFactory()
    user_id = factory.Sequence(lambda n: f"user-{n}")
    name = factory.Faker("word")
    key_hash = factory.Faker("sha256")
    rate_limit_tier = "basic"
