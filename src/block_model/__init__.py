"""
Public API for the block_model package.

This module re-exports the declarative block descriptors so users can
import them directly from `block_model`.
"""

__version__ = "0.1.0"

# Enums
from .enums import (
    ParamType,
    BlockCategory,
    DeploymentMode,
    SelectionState,
)

# Visibility predicates
from .conditions import (
    Condition,
    ConditionContext,
    FieldCondition,
    AllCondition,
    AnyCondition,
    NotCondition,
    referenced_fields,
)

# Fields and blocks
from .fields import FieldOption, FieldVariant, FieldSpec
from .blocks import ToolsConfig, OutputSpec, BlockConfig

# Workflow graph snapshot
from .workflow import WorkflowBlock, Connection, WorkflowGraph

__all__ = [
    # Version
    "__version__",
    # Enums
    "ParamType",
    "BlockCategory",
    "DeploymentMode",
    "SelectionState",
    # Conditions
    "Condition",
    "ConditionContext",
    "FieldCondition",
    "AllCondition",
    "AnyCondition",
    "NotCondition",
    "referenced_fields",
    # Fields / blocks
    "FieldOption",
    "FieldVariant",
    "FieldSpec",
    "ToolsConfig",
    "OutputSpec",
    "BlockConfig",
    # Workflow
    "WorkflowBlock",
    "Connection",
    "WorkflowGraph",
]
