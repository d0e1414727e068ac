"""
Conditional field visibility.
Pure functions: safe to call on every keystroke, no I/O, no state.
"""

from typing import Any, List, Mapping, Optional

from block_model import (
    AllCondition,
    AnyCondition,
    BlockConfig,
    Condition,
    ConditionContext,
    FieldCondition,
)


def is_active(
        condition: Optional[Condition],
        values: Mapping[str, Any],
        context: Optional[ConditionContext] = None,
) -> bool:
    """
    Decide whether a field guarded by `condition` is currently active.

    Args:
        condition: Predicate declared on the field; None means always active
        values: Current field values of the block instance
        context: Named lists referenced by `value_from` predicates

    Returns:
        True if the field should be shown and validated
    """
    if condition is None:
        return True
    if isinstance(condition, FieldCondition):
        return _leaf_matches(condition, values, context or {})
    if isinstance(condition, AllCondition):
        return all(is_active(child, values, context) for child in condition.all)
    if isinstance(condition, AnyCondition):
        return any(is_active(child, values, context) for child in condition.any)
    return not is_active(condition.inner, values, context)


def _leaf_matches(condition: FieldCondition, values: Mapping[str, Any], context: ConditionContext) -> bool:
    current = values.get(condition.field)
    if condition.value_from is not None:
        expected: Any = list(context.get(condition.value_from, []))
    else:
        expected = condition.value

    if isinstance(expected, list):
        matches = _is_member(current, expected)
    else:
        matches = _equals(current, expected)

    if condition.negate:
        matches = not matches
    if condition.and_ is not None:
        matches = matches and _leaf_matches(condition.and_, values, context)
    return matches


def _equals(current: Any, expected: Any) -> bool:
    # switch values never match numbers (True == 1)
    if isinstance(current, bool) != isinstance(expected, bool):
        return False
    return current == expected


def _is_member(current: Any, expected: List[Any]) -> bool:
    if current is None:
        return False
    return any(_equals(current, candidate) for candidate in expected)


def active_field_ids(
        block: BlockConfig,
        values: Mapping[str, Any],
        context: Optional[ConditionContext] = None,
) -> List[str]:
    """Ids of the block's fields that are active for the given values, in declared order"""
    return [spec.id for spec in block.fields if is_active(spec.condition, values, context)]
