"""
Operation -> tool resolution.
Misses are always errors; no block silently falls back to a default operation.
"""

import logging
from typing import Any, Mapping, Optional

from block_model import BlockConfig
from .errors import OperationNotSpecified, UnknownOperation
from .providers import ProviderRegistry

logger = logging.getLogger(__name__)


def resolve_tool(operation_id: str, tool_table: Mapping[str, str]) -> str:
    """
    Look up the tool for an operation.

    Args:
        operation_id: Operation selected by the user
        tool_table: Static operation -> tool id table of a block

    Returns:
        Tool id

    Raises:
        UnknownOperation: operation_id is not in the table
    """
    try:
        return tool_table[operation_id]
    except (KeyError, TypeError):
        raise UnknownOperation(str(operation_id), tool_table.keys()) from None


def resolve_block_tool(
        block: BlockConfig,
        values: Mapping[str, Any],
        providers: Optional[ProviderRegistry] = None,
) -> str:
    """
    Pick the tool a block instance invokes for its current values.

    Raises:
        OperationNotSpecified: the operation field is empty
        UnknownOperation: the operation, or the model's provider tool, is not mapped
        UnknownModelProvider: no provider serves the selected model
    """
    tools = block.tools
    if tools.tool:
        return tools.tool

    if tools.provider_field:
        if providers is None:
            raise ValueError(f"Block '{block.type}' resolves tools by provider; a ProviderRegistry is required")
        model = values.get(tools.provider_field)
        if _is_blank(model):
            raise OperationNotSpecified(tools.provider_field, [])
        provider = providers.resolve_provider(str(model).strip())
        if provider.tool_id not in tools.access:
            raise UnknownOperation(provider.tool_id, tools.access)
        logger.debug("Block %s: model %s -> tool %s", block.type, model, provider.tool_id)
        return provider.tool_id

    operation = values.get(block.operation_field)
    if _is_blank(operation):
        raise OperationNotSpecified(block.operation_field, tools.operations.keys())
    tool_id = resolve_tool(str(operation).strip(), tools.operations)
    logger.debug("Block %s: operation %s -> tool %s", block.type, operation, tool_id)
    return tool_id


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
