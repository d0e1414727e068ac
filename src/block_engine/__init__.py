"""
block_engine - dynamic configuration resolution for workflow blocks
Layered architecture:
1. block_model - Declarative block descriptors
2. Condition evaluation, operation resolution, parameter normalization
3. Router specialization - prompt synthesis and destination selection
4. BlockEngine - facade used by the workflow runtime
"""

from .engine import BlockEngine
from .registry import BlockRegistry
from .config_loader import ConfigLoader, GlobalConfig
from .condition_evaluator import is_active, active_field_ids
from .operation_resolver import resolve_tool, resolve_block_tool
from .normalizer import ParameterNormalizer
from .providers import (
    ProviderConfig, ProviderRegistry, ModelPricing, ModelAvailability,
    StaticModelAvailability, OllamaModelAvailability, keyless_models,
)
from .client import ModelInvoker, AnthropicModelInvoker, ProviderDispatchInvoker
from .router import build_prompt, candidates_from_workflow, DestinationSelector, RoutingSession

from .errors import (
    BlockEngineError, OperationResolutionError, UnknownOperation,
    OperationNotSpecified, ParameterValidationError, MissingCredential,
    RoutingProtocolViolation, UnknownModelProvider, UnknownBlockType,
    BlockDefinitionError,
)
from .models import (
    ToolInvocation, TokenUsage, Cost, ModelSettings, ModelRequest,
    ModelResponse, CandidateDestination, SelectedPath, RoutingDecision,
    FieldView,
)

__version__ = "0.1.0"

__all__ = [
    # Core components
    'BlockEngine',
    'BlockRegistry',
    'ConfigLoader', 'GlobalConfig',
    'is_active', 'active_field_ids',
    'resolve_tool', 'resolve_block_tool',
    'ParameterNormalizer',

    # Providers and model invocation
    'ProviderConfig', 'ProviderRegistry', 'ModelPricing', 'ModelAvailability',
    'StaticModelAvailability', 'OllamaModelAvailability', 'keyless_models',
    'ModelInvoker', 'AnthropicModelInvoker', 'ProviderDispatchInvoker',

    # Router
    'build_prompt', 'candidates_from_workflow', 'DestinationSelector', 'RoutingSession',

    # Errors
    'BlockEngineError', 'OperationResolutionError', 'UnknownOperation',
    'OperationNotSpecified', 'ParameterValidationError', 'MissingCredential',
    'RoutingProtocolViolation', 'UnknownModelProvider', 'UnknownBlockType',
    'BlockDefinitionError',

    # Shared models
    'ToolInvocation', 'TokenUsage', 'Cost', 'ModelSettings', 'ModelRequest',
    'ModelResponse', 'CandidateDestination', 'SelectedPath', 'RoutingDecision',
    'FieldView',
]
