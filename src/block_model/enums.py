from enum import StrEnum


class ParamType(StrEnum):
    """Value types a block field can carry"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    ARRAY = "array"


class BlockCategory(StrEnum):
    """Toolbar categories for blocks"""
    BLOCKS = "blocks"
    TOOLS = "tools"
    TRIGGERS = "triggers"


class DeploymentMode(StrEnum):
    """Deployment modes that decide which models run without an API key"""
    HOSTED = "hosted"
    SELF_HOSTED = "self_hosted"


class SelectionState(StrEnum):
    """Lifecycle of a single routing invocation"""
    IDLE = "idle"
    INVOKING = "invoking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
