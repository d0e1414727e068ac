"""
Parameter normalization for block tools.

Raw block values arrive from the UI layer in heterogeneous shapes: the same
logical parameter may be filled through a selector or a manual text field,
JSON may be stringified, numbers may be typed as text. The normalizer turns
them into one canonical parameter set for the resolved tool, or fails with
every problem it found.
"""

import json
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from block_model import BlockConfig, ConditionContext, FieldSpec, ParamType
from .condition_evaluator import is_active
from .errors import ParameterValidationError

logger = logging.getLogger(__name__)

_MISSING = object()


class ParameterNormalizer:
    """Normalize and validate the parameters of one block type"""

    def __init__(self, block: BlockConfig):
        self.block = block

    def normalize(
            self,
            raw_params: Mapping[str, Any],
            operation_id: Optional[str] = None,
            context: Optional[ConditionContext] = None,
    ) -> Dict[str, Any]:
        """
        Build the canonical parameter set.

        Args:
            raw_params: Current field values of the block instance
            operation_id: Selected operation; read from the block's operation
                field when omitted
            context: Snapshot lists referenced by `value_from` conditions

        Returns:
            Parameter set: undeclared keys passed through, overlaid with the
            canonicalized, decoded and coerced values of active fields

        Raises:
            ParameterValidationError: carrying every problem found, in field order
        """
        values = selector_values(self.block, raw_params, operation_id)
        if operation_id is None and self.block.operation_field:
            operation_id = values.get(self.block.operation_field)

        errors: List[str] = []
        declared = {spec.id for spec in self.block.fields}
        params: Dict[str, Any] = {
            key: value for key, value in values.items() if key not in declared
        }

        for param_id, group in self.block.field_groups().items():
            specs = [
                spec.for_operation(operation_id)
                for spec in group
                if is_active(spec.condition, values, context)
            ]
            if not specs:
                continue

            source, value = self._select_source(specs, values)
            spec = source or specs[0]

            value, ok = self._convert(spec, value, errors)
            if not ok:
                continue

            if is_empty(value):
                if any(s.is_required(operation_id) for s in specs):
                    errors.append(self._required_message(spec, operation_id))
                continue

            if not self._check_shape(spec, value, errors):
                continue

            params[param_id] = value

        if errors:
            raise ParameterValidationError(errors, operation_id)

        logger.debug("Normalized %s parameters for %s/%s", len(params), self.block.type, operation_id)
        return params

    # === Step 1: canonical identifiers ===

    @staticmethod
    def _select_source(specs: List[FieldSpec], raw_params: Mapping[str, Any]) -> Tuple[Optional[FieldSpec], Any]:
        """First non-empty source in declared priority order"""
        shared = len(specs) > 1 or specs[0].canonical_param_id is not None
        for spec in specs:
            value = raw_params.get(spec.id, _MISSING)
            if value is _MISSING:
                continue
            if shared and isinstance(value, str) and spec.type == ParamType.STRING:
                value = value.strip()
            if not is_empty(value):
                return spec, value
        return None, None

    # === Steps 2-3: decoding and coercion ===

    def _convert(self, spec: FieldSpec, value: Any, errors: List[str]) -> Tuple[Any, bool]:
        if is_empty(value):
            return value, True
        if spec.type in (ParamType.JSON, ParamType.ARRAY):
            return self._decode_json(spec, value, errors)
        if spec.type == ParamType.NUMBER:
            return self._coerce_number(spec, value, errors)
        if spec.type == ParamType.BOOLEAN:
            return self._coerce_boolean(spec, value, errors)
        return value, True

    @staticmethod
    def _decode_json(spec: FieldSpec, value: Any, errors: List[str]) -> Tuple[Any, bool]:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                errors.append(
                    f"Invalid JSON in {spec.title}: {e.msg} (line {e.lineno}, column {e.colno})"
                )
                return None, False
            except RecursionError:
                errors.append(f"Invalid JSON in {spec.title}: nesting too deep")
                return None, False
        if spec.type == ParamType.ARRAY and not isinstance(value, list):
            errors.append(f"{spec.title} must be an array")
            return None, False
        return value, True

    @staticmethod
    def _coerce_number(spec: FieldSpec, value: Any, errors: List[str]) -> Tuple[Any, bool]:
        number: Any = None
        if isinstance(value, bool):
            number = None
        elif isinstance(value, (int, float)):
            number = value
        elif isinstance(value, str) and _is_plain_number(value):
            text = value.strip()
            try:
                number = int(text)
            except ValueError:
                try:
                    number = float(text)
                except ValueError:
                    number = None

        if number is None or (isinstance(number, float) and not math.isfinite(number)):
            errors.append(f"{spec.title} must be a number")
            return None, False
        if spec.min is not None and number < spec.min:
            errors.append(f"{spec.title} must be at least {_format_bound(spec.min)}")
            return None, False
        if spec.max is not None and number > spec.max:
            errors.append(f"{spec.title} must be at most {_format_bound(spec.max)}")
            return None, False
        return number, True

    @staticmethod
    def _coerce_boolean(spec: FieldSpec, value: Any, errors: List[str]) -> Tuple[Any, bool]:
        if isinstance(value, bool):
            return value, True
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true", True
        errors.append(f"{spec.title} must be true or false")
        return None, False

    # === Step 4: required fields ===

    @staticmethod
    def _required_message(spec: FieldSpec, operation_id: Optional[str]) -> str:
        if isinstance(spec.required, list) and operation_id:
            return f"{spec.title} is required for operation: {operation_id}"
        return f"{spec.title} is required"

    # === Step 5: nested shapes and allowed values ===

    @staticmethod
    def _check_shape(spec: FieldSpec, value: Any, errors: List[str]) -> bool:
        if spec.ui == "dropdown" and spec.options and spec.type == ParamType.STRING:
            allowed = [option.id for option in spec.options]
            if value not in allowed:
                errors.append(f"{spec.title} must be one of: {', '.join(allowed)}")
                return False

        if not spec.item_required_keys and not spec.item_allowed_values:
            return True
        if not isinstance(value, list):
            errors.append(f"{spec.title} must be an array")
            return False

        # one message per field: stop at the first malformed element
        for index, item in enumerate(value):
            if not isinstance(item, dict):
                errors.append(f"{spec.title}[{index}] must be an object")
                return False
            missing = [key for key in spec.item_required_keys if is_empty(item.get(key))]
            if missing:
                errors.append(f"{spec.title}[{index}] is missing required keys: {', '.join(missing)}")
                return False
            for key, allowed in spec.item_allowed_values.items():
                if key in item and item[key] not in allowed:
                    errors.append(f"{spec.title}[{index}].{key} must be one of: {', '.join(allowed)}")
                    return False
        return True


def selector_values(
        block: BlockConfig,
        values: Mapping[str, Any],
        operation_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Field values as conditions and tool resolution see them: the operation
    and model selectors trimmed, and an explicit operation taking the place
    of the operation field.
    """
    view = dict(values)
    for field_id in (block.operation_field, block.tools.provider_field):
        if field_id and isinstance(view.get(field_id), str):
            view[field_id] = view[field_id].strip()
    if operation_id is not None and block.operation_field:
        view[block.operation_field] = operation_id
    return view


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _is_plain_number(text: str) -> bool:
    # int/float also accept digit separators and non-ASCII digits
    return text.isascii() and "_" not in text


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)
