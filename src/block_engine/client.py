"""
Model invocation boundary.
Transport, authentication and retries belong to the invokers, not to the engine.
"""

import logging
from typing import Mapping, Optional, Protocol

from anthropic import AsyncAnthropic

from .errors import MissingCredential, UnknownModelProvider
from .models import ModelRequest, ModelResponse, TokenUsage

logger = logging.getLogger(__name__)


class ModelInvoker(Protocol):
    """Anything that can send a prompt to a model and return its raw text"""

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        ...


class AnthropicModelInvoker:
    """Invoker backed by the Anthropic messages API"""

    def __init__(self, api_key: Optional[str] = None):
        """
        Args:
            api_key: Deployment key used when a request carries none
        """
        self._default_key = api_key
        self._default_client: Optional[AsyncAnthropic] = None

    def _get_default_client(self) -> AsyncAnthropic:
        if self._default_client is None:
            self._default_client = AsyncAnthropic(api_key=self._default_key)
        return self._default_client

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        # user keys get a short-lived client; only the deployment client is kept
        if request.api_key:
            async with AsyncAnthropic(api_key=request.api_key) as client:
                return await self._send(client, request)
        if not self._default_key:
            raise MissingCredential(["apiKey"])
        return await self._send(self._get_default_client(), request)

    @staticmethod
    async def _send(client: AsyncAnthropic, request: ModelRequest) -> ModelResponse:
        response = await client.messages.create(
            model=request.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            messages=[{"role": "user", "content": request.prompt}]
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = None
        if getattr(response, "usage", None) is not None:
            prompt_tokens = response.usage.input_tokens or 0
            completion_tokens = response.usage.output_tokens or 0
            usage = TokenUsage(
                prompt=prompt_tokens,
                completion=completion_tokens,
                total=prompt_tokens + completion_tokens,
            )
        return ModelResponse(text=text, usage=usage)


class ProviderDispatchInvoker:
    """Routes each request to the invoker registered for its provider"""

    def __init__(self, invokers: Mapping[str, ModelInvoker]):
        self._invokers = dict(invokers)

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        invoker = self._invokers.get(request.provider_id)
        if invoker is None:
            raise UnknownModelProvider(request.model)
        logger.debug("Dispatching %s to provider %s", request.model, request.provider_id)
        return await invoker.invoke(request)
