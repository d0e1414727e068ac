"""
Destination selection: one model call per routing decision, validated strictly.
"""

import logging
from typing import List, Optional, Sequence

from block_model import SelectionState
from ..client import ModelInvoker
from ..errors import RoutingProtocolViolation
from ..models import (
    CandidateDestination, Cost, ModelRequest, ModelSettings,
    RoutingDecision, SelectedPath, TokenUsage,
)
from ..providers import ModelPricing, ProviderConfig, ProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 100


class RoutingSession:
    """Single routing invocation: idle -> invoking -> succeeded | failed"""

    def __init__(
            self,
            request: ModelRequest,
            candidates: Sequence[CandidateDestination],
            pricing: Optional[ModelPricing] = None,
    ):
        self.request = request
        self.candidates = list(candidates)
        self.pricing = pricing
        self.state = SelectionState.IDLE
        self.raw_text: Optional[str] = None
        self.decision: Optional[RoutingDecision] = None
        self.error: Optional[Exception] = None

    async def run(self, invoker: ModelInvoker) -> RoutingDecision:
        if self.state != SelectionState.IDLE:
            raise RuntimeError(f"Routing session already {self.state}")
        self.state = SelectionState.INVOKING
        try:
            response = await invoker.invoke(self.request)
            self.raw_text = response.text
            self.decision = self._decide(response.text, response.usage)
        except Exception as e:
            self.state = SelectionState.FAILED
            self.error = e
            raise
        self.state = SelectionState.SUCCEEDED
        return self.decision

    def _decide(self, raw_text: str, usage: Optional[TokenUsage]) -> RoutingDecision:
        selected_id = raw_text.strip()
        chosen = next((c for c in self.candidates if c.id == selected_id), None)
        if chosen is None:
            raise RoutingProtocolViolation(raw_text, [c.id for c in self.candidates])
        logger.debug("Router selected %s using %s", chosen.id, self.request.model)
        return RoutingDecision(
            selected_id=chosen.id,
            selected_path=SelectedPath(
                block_id=chosen.id,
                block_type=chosen.type,
                block_title=chosen.title,
            ),
            model=self.request.model,
            prompt=self.request.prompt,
            tokens=usage,
            cost=_cost(usage, self.pricing),
        )


class DestinationSelector:
    """Asks a model to choose one destination and validates the answer"""

    def __init__(
            self,
            invoker: ModelInvoker,
            providers: ProviderRegistry,
            temperature: float = DEFAULT_TEMPERATURE,
            max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        self.invoker = invoker
        self.providers = providers
        self.temperature = temperature
        self.max_tokens = max_tokens

    def open_session(
            self,
            prompt: str,
            settings: ModelSettings,
            candidates: Sequence[CandidateDestination],
    ) -> RoutingSession:
        """
        Prepare a routing session without invoking anything.

        Raises:
            UnknownModelProvider: the model has no registered provider
            ValueError: the candidate set is empty or has duplicate ids
        """
        ids: List[str] = [c.id for c in candidates]
        if not ids:
            raise ValueError("Router has no candidate destinations")
        if len(ids) != len(set(ids)):
            raise ValueError(f"Candidate ids must be unique: {ids}")

        provider: ProviderConfig = self.providers.resolve_provider(settings.model)
        request = ModelRequest(
            provider_id=provider.id,
            model=settings.model,
            prompt=prompt,
            api_key=settings.api_key,
            temperature=settings.temperature if settings.temperature is not None else self.temperature,
            max_tokens=settings.max_tokens or self.max_tokens,
        )
        return RoutingSession(request, candidates, self.providers.pricing_for(settings.model))

    async def select(
            self,
            prompt: str,
            settings: ModelSettings,
            candidates: Sequence[CandidateDestination],
    ) -> RoutingDecision:
        """
        Invoke the model and return the validated routing decision.

        Raises:
            RoutingProtocolViolation: the trimmed output is not exactly one candidate id
        """
        session = self.open_session(prompt, settings, candidates)
        return await session.run(self.invoker)


def _cost(usage: Optional[TokenUsage], pricing: Optional[ModelPricing]) -> Optional[Cost]:
    if usage is None or pricing is None:
        return None
    input_cost = usage.prompt * pricing.input / 1_000_000
    output_cost = usage.completion * pricing.output / 1_000_000
    return Cost(input=input_cost, output=output_cost, total=input_cost + output_cost)
