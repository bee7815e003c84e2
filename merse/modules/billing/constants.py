from enum import Enum


class CreditAction(str, Enum):
    SITE = "site"
    IMAGE = "image"
    MODEL = "model"
    EFFECT = "effect"


# Unit cost per action, in credits
CREDIT_COSTS: dict[CreditAction, int] = {
    CreditAction.SITE: 20,
    CreditAction.IMAGE: 10,
    CreditAction.MODEL: 50,
    CreditAction.EFFECT: 10,
}

# Bounded list of recent audit failures kept by the usage recorder
AUDIT_DIAGNOSTICS_SIZE = 100

# Largest amount a single consume request may ask for
MAX_CONSUME_AMOUNT = 100_000
