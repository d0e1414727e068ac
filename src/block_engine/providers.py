"""
Model provider registry and model availability snapshots.

The registry maps a model name to the provider serving it. Availability
queries tell which models run without a user supplied API key in the
current deployment mode; their result parameterizes the API key condition.
"""

import logging
import re
from typing import Dict, List, Optional, Protocol, Sequence

import httpx
from pydantic import BaseModel, Field

from block_model import DeploymentMode
from .errors import UnknownModelProvider

logger = logging.getLogger(__name__)

# Context key referenced by `value_from` in API key conditions
KEYLESS_MODELS = "keyless_models"


class ModelPricing(BaseModel):
    """Price in USD per million tokens"""
    input: float = Field(ge=0.0)
    output: float = Field(ge=0.0)


class ProviderConfig(BaseModel):
    """Provider serving a family of models"""
    id: str = Field(min_length=1, description="Provider identifier, e.g. anthropic")
    name: str = Field(default="")
    tool_id: str = Field(min_length=1, description="Tool invoked for this provider's chat models")
    models: List[str] = Field(default_factory=list, description="Model names served")
    model_patterns: List[str] = Field(default_factory=list, description="Regexes matching further model names")
    pricing: Dict[str, ModelPricing] = Field(default_factory=dict, description="Per-model pricing")

    def serves_exactly(self, model: str) -> bool:
        lowered = model.lower()
        return any(lowered == name.lower() for name in self.models)

    def serves_by_pattern(self, model: str) -> bool:
        return any(re.search(pattern, model, re.IGNORECASE) for pattern in self.model_patterns)


class ProviderRegistry:
    """Read-only lookup from model name to provider"""

    def __init__(self, providers: Sequence[ProviderConfig]):
        self._providers = list(providers)

    @property
    def providers(self) -> List[ProviderConfig]:
        return list(self._providers)

    def lookup_provider(self, model: str) -> Optional[ProviderConfig]:
        """
        Find the provider for a model.

        Exact model lists of every provider are checked before any pattern,
        so an explicitly listed model never loses to another provider's regex.

        Returns:
            ProviderConfig, or None when no provider serves the model
        """
        if not model:
            return None
        for provider in self._providers:
            if provider.serves_exactly(model):
                return provider
        for provider in self._providers:
            if provider.serves_by_pattern(model):
                return provider
        return None

    def resolve_provider(self, model: str) -> ProviderConfig:
        provider = self.lookup_provider(model)
        if provider is None:
            raise UnknownModelProvider(model)
        logger.debug("Model %s resolved to provider %s", model, provider.id)
        return provider

    def pricing_for(self, model: str) -> Optional[ModelPricing]:
        provider = self.lookup_provider(model)
        if provider is None:
            return None
        for name, pricing in provider.pricing.items():
            if name.lower() == model.lower():
                return pricing
        return None


class ModelAvailability(Protocol):
    """Source of the models usable without an API key"""

    def list_hosted_models(self) -> List[str]:
        ...

    def list_local_models(self) -> List[str]:
        ...


class StaticModelAvailability:
    """Availability taken from configuration"""

    def __init__(self, hosted_models: Sequence[str] = (), local_models: Sequence[str] = ()):
        self._hosted = list(hosted_models)
        self._local = list(local_models)

    def list_hosted_models(self) -> List[str]:
        return list(self._hosted)

    def list_local_models(self) -> List[str]:
        return list(self._local)


class OllamaModelAvailability:
    """Local models discovered from an Ollama server"""

    def __init__(
            self,
            base_url: str = "http://localhost:11434",
            hosted_models: Sequence[str] = (),
            timeout: float = 5.0,
            client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._hosted = list(hosted_models)
        self._timeout = timeout
        self._client = client

    def list_hosted_models(self) -> List[str]:
        return list(self._hosted)

    def list_local_models(self) -> List[str]:
        """Names reported by `GET /api/tags`; empty when the server cannot be queried"""
        url = f"{self.base_url}/api/tags"
        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self._timeout)
            else:
                response = httpx.get(url, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not list Ollama models from %s: %s", url, e)
            return []
        return [
            entry["name"]
            for entry in payload.get("models", [])
            if isinstance(entry, dict) and entry.get("name")
        ]


def keyless_models(mode: DeploymentMode, availability: Optional[ModelAvailability]) -> List[str]:
    """
    Models that need no API key in the given deployment mode.

    A failing availability query degrades to an empty list, which makes the
    API key required for every model.
    """
    if availability is None:
        return []
    try:
        if mode == DeploymentMode.HOSTED:
            return list(availability.list_hosted_models())
        return list(availability.list_local_models())
    except Exception as e:  # noqa: BLE001
        logger.warning("Model availability query failed in %s mode: %s", mode, e)
        return []


def condition_context(mode: DeploymentMode, availability: Optional[ModelAvailability]) -> Dict[str, List[str]]:
    """Snapshot handed to condition evaluation and normalization"""
    return {KEYLESS_MODELS: keyless_models(mode, availability)}
