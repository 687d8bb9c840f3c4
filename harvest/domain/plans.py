# harvest/domain/plans.py
"""
Subscription plan rules: monthly kg limits, allowed categories and the
weight arithmetic shared by the cart and the order checkout.
"""
from typing import Iterable

from harvest.domain.enums import Plan, Category, VALID_STATUSES
from harvest.domain.errors import CapacityExceededError

PLAN_LIMITS = {
    Plan.BASIC.value: 5.0,
    Plan.STANDARD.value: 8.0,
    Plan.PREMIUM.value: 10.0,
}

_BASIC = (Category.FRUITS.value, Category.VEGETABLES.value)
_STANDARD = _BASIC + (
    Category.LEGUMES.value,
    Category.HERBS.value,
    Category.SNACKS.value,
    Category.COFFEE.value,
    Category.CHOCOLATE.value,
)
_PREMIUM = _STANDARD + (Category.PROTEINS.value,)

PLAN_CATEGORIES = {
    Plan.BASIC.value: frozenset(_BASIC),
    Plan.STANDARD.value: frozenset(_STANDARD),
    Plan.PREMIUM.value: frozenset(_PREMIUM),
}


def limit_for_plan(plan: str) -> float:
    try:
        return PLAN_LIMITS[plan]
    except KeyError:
        raise ValueError(f"Invalid plan. Must be one of: {', '.join(PLAN_LIMITS)}")


def is_category_allowed(category: str, plan: str) -> bool:
    return category in PLAN_CATEGORIES.get(plan, ())


def is_valid_status(status) -> bool:
    return status in VALID_STATUSES


def total_weight(items: Iterable) -> float:
    return sum((item.weight_in_kg for item in items), 0.0)


def remaining_kg(subscription) -> float:
    return max(0.0, subscription.limit_in_kg - subscription.used_kg)


def check_capacity(subscription, weight: float, action: str = "create this order", scope: str = ""):
    """
    Raise CapacityExceededError when `weight` more kg would push the
    subscription past its monthly limit. Nothing is mutated here.

    `scope` qualifies the remaining kg in the message, e.g. " before this cart"
    when `weight` is a whole cart rather than the kg being added.
    """
    if subscription.used_kg + weight <= subscription.limit_in_kg:
        return

    left = subscription.limit_in_kg - subscription.used_kg
    raise CapacityExceededError(
        f"You cannot {action}: it would exceed your {subscription.limit_in_kg:g} kg limit. "
        f"You have {left:.2f} kg remaining{scope}.",
        data={
            "total_weight_in_kg": weight,
            "current_used": subscription.used_kg,
            "limit": subscription.limit_in_kg,
            "would_exceed": True,
        },
    )
