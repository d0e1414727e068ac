"""
Declarative visibility predicates for block fields.

Predicates are loaded from block definitions in one of four shapes:

    {field: operation, value: [insert, update], not: false, and: {...}}
    {all: [<predicate>, ...]}
    {any: [<predicate>, ...]}
    {not: <predicate>}

The leaf shape is the one every block uses today; the composite shapes allow
arbitrary boolean trees without special-casing the single `and` link.
"""

from typing import Annotated, Any, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

ConditionScalar = Union[bool, int, float, str, None]

# Named lists a predicate may reference through `value_from`,
# e.g. {"keyless_models": ["gpt-4o", "llama3"]}
ConditionContext = Mapping[str, Sequence[Any]]


class FieldCondition(BaseModel):
    """Leaf predicate comparing one field against an expected value or values"""
    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(min_length=1, description="Field id whose current value is inspected")
    value: Union[ConditionScalar, List[ConditionScalar]] = Field(
        default=None, description="Expected value, or list of accepted values"
    )
    value_from: Optional[str] = Field(
        default=None, description="Name of a context list used instead of a static value"
    )
    negate: bool = Field(default=False, alias="not")
    and_: Optional["FieldCondition"] = Field(default=None, alias="and")

    @model_validator(mode='after')
    def validate_value_source(self):
        if self.value_from is not None and self.value is not None:
            raise ValueError('value and value_from are mutually exclusive')
        return self


class AllCondition(BaseModel):
    """Conjunction of predicates"""
    all: List["Condition"] = Field(min_length=1)


class AnyCondition(BaseModel):
    """Disjunction of predicates"""
    any: List["Condition"] = Field(min_length=1)


class NotCondition(BaseModel):
    """Negation of a predicate"""
    model_config = ConfigDict(populate_by_name=True)

    inner: "Condition" = Field(alias="not")


def _condition_kind(data: Any) -> Optional[str]:
    if isinstance(data, BaseModel):
        return _MODEL_TAGS.get(type(data))
    if not isinstance(data, dict):
        return None
    # Leaf predicates also carry a boolean `not`, so `field` is checked first
    if "field" in data:
        return "field"
    for kind in ("all", "any", "not"):
        if kind in data:
            return kind
    return None


Condition = Annotated[
    Union[
        Annotated[FieldCondition, Tag("field")],
        Annotated[AllCondition, Tag("all")],
        Annotated[AnyCondition, Tag("any")],
        Annotated[NotCondition, Tag("not")],
    ],
    Discriminator(_condition_kind),
]

_MODEL_TAGS = {
    FieldCondition: "field",
    AllCondition: "all",
    AnyCondition: "any",
    NotCondition: "not",
}

FieldCondition.model_rebuild()
AllCondition.model_rebuild()
AnyCondition.model_rebuild()
NotCondition.model_rebuild()


def referenced_fields(condition: Condition) -> List[str]:
    """Field ids a predicate reads, in the order they appear"""
    if isinstance(condition, FieldCondition):
        fields = [condition.field]
        if condition.and_ is not None:
            fields.extend(referenced_fields(condition.and_))
        return fields
    if isinstance(condition, AllCondition):
        return [f for child in condition.all for f in referenced_fields(child)]
    if isinstance(condition, AnyCondition):
        return [f for child in condition.any for f in referenced_fields(child)]
    return referenced_fields(condition.inner)
