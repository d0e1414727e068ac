"""
Exceptions raised by the block engine.
Every failure mode has its own type so callers can tell them apart.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union


class BlockEngineError(Exception):
    """Base class for all block engine errors"""
    pass


class OperationResolutionError(BlockEngineError):
    """Raised when no tool can be selected for a block"""
    pass


class UnknownOperation(OperationResolutionError):
    """Raised when an operation id has no tool mapping"""

    def __init__(self, operation_id: str, valid_operations: Iterable[str]):
        self.operation_id = operation_id
        self.valid_operations = sorted(valid_operations)
        super().__init__(
            f"Unknown operation '{operation_id}'. "
            f"Valid operations: {', '.join(self.valid_operations) or '(none)'}"
        )


class OperationNotSpecified(OperationResolutionError):
    """Raised when a block needs an operation and none was selected"""

    def __init__(self, field_id: str, valid_operations: Iterable[str]):
        self.field_id = field_id
        self.valid_operations = sorted(valid_operations)
        super().__init__(
            f"No operation selected in '{field_id}'. "
            f"Valid operations: {', '.join(self.valid_operations) or '(none)'}"
        )


class ParameterValidationError(BlockEngineError):
    """Raised with every problem found while normalizing block parameters"""

    def __init__(self, errors: Sequence[str], operation_id: Optional[str] = None):
        self.errors: List[str] = list(errors)
        self.operation_id = operation_id
        super().__init__("; ".join(self.errors))


class MissingCredential(BlockEngineError):
    """Raised when a credential field is required but empty"""

    def __init__(self, field_ids: Sequence[str]):
        self.field_ids = list(field_ids)
        super().__init__(f"Missing credential: {', '.join(self.field_ids)}")


class RoutingProtocolViolation(BlockEngineError):
    """Raised when model output is not exactly one candidate id"""

    def __init__(self, raw_text: str, candidate_ids: Sequence[str]):
        self.raw_text = raw_text
        self.candidate_ids = list(candidate_ids)
        preview = raw_text if len(raw_text) <= 200 else raw_text[:200] + "..."
        super().__init__(
            f"Model response {preview!r} does not match any candidate id "
            f"({', '.join(self.candidate_ids)})"
        )


class UnknownModelProvider(BlockEngineError):
    """Raised when a model name has no registered provider"""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"No provider registered for model '{model}'")


class UnknownBlockType(BlockEngineError):
    """Raised when a block type is not present in the registry"""

    def __init__(self, block_type: str):
        self.block_type = block_type
        super().__init__(f"Unknown block type '{block_type}'")


class BlockDefinitionError(BlockEngineError):
    """Raised when a block definition file cannot be loaded"""

    def __init__(self, source_path: Union[str, Path], message: str):
        self.source_path = str(source_path)
        self.message = message
        super().__init__(f"{source_path}: {message}")
