"""Plan registry: subscription tiers and their credit allotments."""

from dataclasses import dataclass
from enum import Enum


class PlanKey(str, Enum):
    FREE = "free"
    PULSE = "pulse"
    NEBULA = "nebula"
    SUPERNOVA = "supernova"


@dataclass(frozen=True)
class PlanConfig:
    key: PlanKey
    name: str
    limit: int


PLAN_CONFIG: dict[PlanKey, PlanConfig] = {
    PlanKey.FREE: PlanConfig(PlanKey.FREE, "Free Orbit", 300),
    PlanKey.PULSE: PlanConfig(PlanKey.PULSE, "Pulse Starter", 900),
    PlanKey.NEBULA: PlanConfig(PlanKey.NEBULA, "Nebula Studio", 5000),
    PlanKey.SUPERNOVA: PlanConfig(PlanKey.SUPERNOVA, "Supernova Pro", 10000),
}

DEFAULT_PLAN = PlanKey.FREE

# Tier names used before the current plan lineup
LEGACY_PLAN_ALIASES: dict[str, PlanKey] = {
    "starter": PlanKey.FREE,
    "pro": PlanKey.NEBULA,
    "enterprise": PlanKey.SUPERNOVA,
}


def resolve_plan_key(raw: object) -> PlanKey:
    """Map any stored plan value to a canonical key, defaulting to free."""
    value = raw.lower() if isinstance(raw, str) else ""
    try:
        return PlanKey(value)
    except ValueError:
        return LEGACY_PLAN_ALIASES.get(value, DEFAULT_PLAN)


def limit_for(plan: object) -> int:
    return PLAN_CONFIG[resolve_plan_key(plan)].limit
