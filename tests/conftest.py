"""Pytest configuration - shared fixtures"""

import logging

import pytest

from block_engine import BlockRegistry, ModelPricing, ProviderConfig, ProviderRegistry
from block_model import BlockConfig


@pytest.fixture(autouse=True)
def quiet_engine_logs(caplog):
    """Keep engine debug output out of test reports unless a test asks for it"""
    caplog.set_level(logging.WARNING, logger="block_engine")


@pytest.fixture
def providers() -> ProviderRegistry:
    """Two providers: one with an exact model list, one matched by pattern"""
    return ProviderRegistry([
        ProviderConfig(
            id="anthropic",
            name="Anthropic",
            tool_id="anthropic_chat",
            models=["claude-sonnet-4-5"],
            model_patterns=["^claude"],
            pricing={"claude-sonnet-4-5": ModelPricing(input=3.0, output=15.0)},
        ),
        ProviderConfig(
            id="ollama",
            name="Ollama",
            tool_id="ollama_chat",
            model_patterns=["^llama"],
        ),
    ])


@pytest.fixture(scope="session")
def packaged_registry() -> BlockRegistry:
    """Registry of the block definitions shipped with the package"""
    return BlockRegistry.from_directory()


@pytest.fixture
def chat_block() -> BlockConfig:
    """Single-tool block with a messages array"""
    return BlockConfig.model_validate({
        "type": "chat",
        "name": "Chat",
        "tools": {"access": ["chat_completion"], "tool": "chat_completion"},
        "fields": [
            {
                "id": "messages",
                "title": "Messages",
                "type": "json",
                "required": True,
                "item_required_keys": ["role", "content"],
                "item_allowed_values": {"role": ["system", "user", "assistant"]},
            },
            {"id": "temperature", "title": "Temperature", "type": "number", "min": 0, "max": 1},
            {"id": "stream", "title": "Stream", "type": "boolean"},
        ],
    })


@pytest.fixture
def sheet_block() -> BlockConfig:
    """Operation-mapped block with a selector/manual pair sharing a canonical id"""
    return BlockConfig.model_validate({
        "type": "sheet",
        "name": "Sheet",
        "operation_field": "operation",
        "tools": {
            "access": ["sheet_read", "sheet_write"],
            "operations": {"read": "sheet_read", "write": "sheet_write"},
        },
        "fields": [
            {"id": "operation", "title": "Operation", "ui": "dropdown", "options": ["read", "write"]},
            {
                "id": "spreadsheetId",
                "title": "Spreadsheet",
                "ui": "file-selector",
                "canonical_param_id": "spreadsheetId",
                "required": True,
            },
            {
                "id": "manualSpreadsheetId",
                "title": "Spreadsheet ID",
                "canonical_param_id": "spreadsheetId",
            },
            {
                "id": "table",
                "title": "Table Name",
                "required": ["write"],
                "condition": {"field": "operation", "value": "write"},
            },
            {
                "id": "rows",
                "title": "Rows",
                "type": "array",
                "required": ["write"],
                "condition": {"field": "operation", "value": "write"},
                "variants": {"write": {"title": "Rows to Write"}},
            },
        ],
    })
