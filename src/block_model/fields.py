from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .conditions import Condition
from .enums import ParamType


class FieldOption(BaseModel):
    """Selectable option of a dropdown or combobox field"""
    id: str = Field(min_length=1)
    label: str = Field(default="")

    @model_validator(mode='after')
    def default_label(self):
        if not self.label:
            self.label = self.id
        return self


def _coerce_options(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, list):
        return [{"id": item} if isinstance(item, str) else item for item in v]
    return v


class FieldVariant(BaseModel):
    """Per-operation override of a field's presentation and rules"""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    placeholder: Optional[str] = None
    required: Optional[bool] = None
    options: Optional[List[FieldOption]] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator('options', mode='before')
    @classmethod
    def convert_string_options(cls, v: Any):
        return None if v is None else _coerce_options(v)


class FieldSpec(BaseModel):
    """One input of a block as declared in its definition"""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Field identifier, unique within the block")
    title: str = Field(default="", description="Human readable label used in messages")
    ui: str = Field(default="short-input", description="UI control rendering this field")
    type: ParamType = Field(default=ParamType.STRING)
    required: Union[bool, List[str]] = Field(
        default=False, description="Always required, or required for the listed operations"
    )
    canonical_param_id: Optional[str] = Field(
        default=None, description="Logical parameter shared by alternative inputs"
    )
    condition: Optional[Condition] = None
    options: List[FieldOption] = Field(default_factory=list)
    default: Any = None
    placeholder: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    secret: bool = Field(default=False, description="Credential input such as an API key")
    item_required_keys: List[str] = Field(
        default_factory=list, description="Keys every element of a list value must carry"
    )
    item_allowed_values: Dict[str, List[str]] = Field(default_factory=dict)
    variants: Dict[str, FieldVariant] = Field(default_factory=dict)

    @field_validator('options', mode='before')
    @classmethod
    def convert_string_options(cls, v: Any):
        return _coerce_options(v)

    @model_validator(mode='after')
    def default_title(self):
        if not self.title:
            self.title = self.id
        return self

    @property
    def param_id(self) -> str:
        """Key this field is emitted under in the normalized parameter set"""
        return self.canonical_param_id or self.id

    def is_required(self, operation: Optional[str]) -> bool:
        if isinstance(self.required, bool):
            return self.required
        return operation is not None and operation in self.required

    def for_operation(self, operation: Optional[str]) -> "FieldSpec":
        """Effective spec once the operation's variant, if any, is applied"""
        variant = self.variants.get(operation) if operation else None
        if variant is None:
            return self
        return self.model_copy(
            update={name: getattr(variant, name) for name in variant.model_fields_set}
        )
