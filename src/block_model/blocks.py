from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .conditions import referenced_fields
from .enums import BlockCategory, ParamType
from .fields import FieldSpec


class ToolsConfig(BaseModel):
    """How a block maps its current configuration onto a backend tool.

    Exactly one strategy applies:
    - `tool`: the block always invokes the same tool
    - `operations`: operation id (value of the block's operation field) -> tool id
    - `provider_field`: the named field holds a model name; the tool is the
      one registered for that model's provider
    """
    model_config = ConfigDict(extra="forbid")

    access: List[str] = Field(min_length=1, description="Tools this block may invoke")
    tool: Optional[str] = None
    operations: Dict[str, str] = Field(default_factory=dict)
    provider_field: Optional[str] = None

    @model_validator(mode='after')
    def validate_strategy(self):
        strategies = [bool(self.tool), bool(self.operations), bool(self.provider_field)]
        if sum(strategies) != 1:
            raise ValueError('exactly one of tool, operations or provider_field must be set')
        declared = set(self.access)
        mapped = [self.tool] if self.tool else list(self.operations.values())
        for tool_id in mapped:
            if tool_id not in declared:
                raise ValueError(f'tool "{tool_id}" is not declared in access')
        return self


class OutputSpec(BaseModel):
    """Output produced by a block once its tool ran"""
    type: ParamType
    description: str = Field(default="")


class BlockConfig(BaseModel):
    """Declarative descriptor of one workflow block"""
    model_config = ConfigDict(extra="forbid")

    type: str = Field(min_length=1, description="Block type identifier")
    name: str = Field(min_length=1)
    description: str = Field(default="")
    long_description: str = Field(default="")
    category: BlockCategory = Field(default=BlockCategory.TOOLS)
    bg_color: str = Field(default="#FFFFFF")
    icon: Optional[str] = Field(default=None, description="Asset key of the block icon")
    operation_field: Optional[str] = Field(default=None)
    fields: List[FieldSpec] = Field(default_factory=list)
    tools: ToolsConfig
    outputs: Dict[str, OutputSpec] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_fields(self):
        ids = [f.id for f in self.fields]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f'duplicate field ids: {duplicates}')

        known = set(ids)
        for spec in self.fields:
            if spec.condition is None:
                continue
            for ref in referenced_fields(spec.condition):
                if ref not in known:
                    raise ValueError(f'field "{spec.id}" has a condition on unknown field "{ref}"')

        types: Dict[str, ParamType] = {}
        for spec in self.fields:
            previous = types.setdefault(spec.param_id, spec.type)
            if previous != spec.type:
                raise ValueError(f'fields sharing "{spec.param_id}" must share one type')

        if self.tools.operations and self.operation_field not in known:
            raise ValueError('operation_field must name a declared field when operations are mapped')
        if self.tools.provider_field and self.tools.provider_field not in known:
            raise ValueError(f'provider_field "{self.tools.provider_field}" is not a declared field')
        return self

    def get_field(self, field_id: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.id == field_id:
                return spec
        return None

    def field_groups(self) -> Dict[str, List[FieldSpec]]:
        """Fields grouped by canonical parameter id, in declared priority order"""
        groups: Dict[str, List[FieldSpec]] = {}
        for spec in self.fields:
            groups.setdefault(spec.param_id, []).append(spec)
        return groups

    def initial_values(self) -> Dict[str, Any]:
        """Default values a fresh block instance starts with"""
        values: Dict[str, Any] = {}
        for spec in self.fields:
            if spec.default is not None:
                values[spec.id] = spec.default
            elif spec.ui == "dropdown" and spec.options:
                values[spec.id] = spec.options[0].id
        return values
