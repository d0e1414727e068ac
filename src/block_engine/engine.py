import logging
from typing import Any, Dict, List, Mapping, Optional

from block_model import BlockConfig, ConditionContext, DeploymentMode, WorkflowGraph
from .client import ModelInvoker
from .condition_evaluator import is_active
from .config_loader import ConfigLoader, GlobalConfig
from .errors import MissingCredential
from .models import FieldView, ModelSettings, RoutingDecision, ToolInvocation
from .normalizer import ParameterNormalizer, is_empty, selector_values
from .operation_resolver import resolve_block_tool
from .providers import (
    ModelAvailability,
    OllamaModelAvailability,
    ProviderRegistry,
    StaticModelAvailability,
    condition_context,
)
from .registry import BlockRegistry
from .router import DestinationSelector, build_prompt, candidates_from_workflow
from .router.selector import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)

ROUTER_BLOCK_TYPE = "router"
ROUTER_PROMPT_FIELD = "prompt"
ROUTER_MODEL_FIELD = "model"
ROUTER_API_KEY_FIELD = "apiKey"


class BlockEngine:
    """Resolves block configuration into tool invocations and routing decisions"""

    def __init__(
            self,
            registry: BlockRegistry,
            providers: ProviderRegistry,
            availability: Optional[ModelAvailability] = None,
            mode: DeploymentMode = DeploymentMode.HOSTED,
            router_temperature: float = DEFAULT_TEMPERATURE,
            router_max_tokens: int = DEFAULT_MAX_TOKENS,
    ):
        """
        Args:
            registry: Block types known to the engine
            providers: Model name -> provider lookup
            availability: Source of the models usable without an API key
            mode: Deployment mode selecting hosted or local keyless models
            router_temperature: Sampling temperature of router model calls
            router_max_tokens: Output token limit of router model calls
        """
        self.registry = registry
        self.providers = providers
        self.availability = availability
        self.mode = mode
        self.router_temperature = router_temperature
        self.router_max_tokens = router_max_tokens

    @classmethod
    def from_config(cls, config: Optional[GlobalConfig] = None) -> "BlockEngine":
        """Wire an engine from configuration (the global config when omitted)"""
        config = config or ConfigLoader.get_config()
        deployment = config.deployment
        if deployment.ollama_url:
            availability: ModelAvailability = OllamaModelAvailability(
                base_url=deployment.ollama_url,
                hosted_models=deployment.hosted_models,
            )
        else:
            availability = StaticModelAvailability(deployment.hosted_models, deployment.local_models)
        return cls(
            registry=BlockRegistry.from_directory(config.blocks_dir),
            providers=ProviderRegistry(config.providers),
            availability=availability,
            mode=deployment.mode,
            router_temperature=config.router.temperature,
            router_max_tokens=config.router.max_tokens,
        )

    def condition_context(self) -> Dict[str, List[str]]:
        """Fresh snapshot of the dynamic lists conditions may reference"""
        return condition_context(self.mode, self.availability)

    # === Field visibility ===

    def visible_fields(
            self,
            block_type: str,
            values: Mapping[str, Any],
            context: Optional[ConditionContext] = None,
    ) -> List[FieldView]:
        """Fields to display for the current values, with the operation's variant applied"""
        block = self.registry.get(block_type)
        context = self.condition_context() if context is None else context
        operation = _operation_of(block, values)
        view = selector_values(block, values, operation)
        views: List[FieldView] = []
        for spec in block.fields:
            if not is_active(spec.condition, view, context):
                continue
            effective = spec.for_operation(operation)
            views.append(FieldView(
                id=effective.id,
                title=effective.title,
                ui=effective.ui,
                required=effective.is_required(operation),
                placeholder=effective.placeholder,
                options=[option.id for option in effective.options],
            ))
        return views

    # === Execution ===

    def prepare(
            self,
            block_type: str,
            values: Mapping[str, Any],
            context: Optional[ConditionContext] = None,
    ) -> ToolInvocation:
        """
        Resolve the tool and its validated parameters for a block instance.

        Raises:
            UnknownBlockType, OperationResolutionError, UnknownModelProvider,
            MissingCredential, ParameterValidationError
        """
        block = self.registry.get(block_type)
        operation = _operation_of(block, values)

        # tool resolution precedes any availability query
        tool_id = resolve_block_tool(block, values, self.providers)
        context = self.condition_context() if context is None else context
        self._check_credentials(block, values, operation, context)
        params = ParameterNormalizer(block).normalize(values, operation, context)

        logger.debug("Prepared %s -> %s", block_type, tool_id)
        return ToolInvocation(tool_id=tool_id, params=params)

    async def route(
            self,
            graph: WorkflowGraph,
            router_id: str,
            invoker: ModelInvoker,
            values: Optional[Mapping[str, Any]] = None,
    ) -> RoutingDecision:
        """
        Run a router block: validate its inputs, build the prompt from the
        connected destinations and let the model pick exactly one of them.

        Args:
            graph: Current workflow graph
            router_id: Id of the router block instance
            invoker: Model invocation collaborator
            values: Router field values; the instance's stored values when omitted
        """
        router = graph.get_block(router_id)
        if router is None:
            raise ValueError(f"Block '{router_id}' not found in workflow")
        if router.type != ROUTER_BLOCK_TYPE:
            raise ValueError(f"Block '{router_id}' is a {router.type} block, not a router")

        invocation = self.prepare(router.type, router.values if values is None else values)
        params = invocation.params

        candidates = candidates_from_workflow(graph, router_id, self.registry)
        prompt = build_prompt(params[ROUTER_PROMPT_FIELD], candidates)
        settings = ModelSettings(
            model=params[ROUTER_MODEL_FIELD],
            api_key=params.get(ROUTER_API_KEY_FIELD),
        )
        selector = DestinationSelector(
            invoker,
            self.providers,
            temperature=self.router_temperature,
            max_tokens=self.router_max_tokens,
        )
        return await selector.select(prompt, settings, candidates)

    @staticmethod
    def _check_credentials(
            block: BlockConfig,
            values: Mapping[str, Any],
            operation: Optional[str],
            context: ConditionContext,
    ) -> None:
        view = selector_values(block, values, operation)
        missing = [
            spec.id
            for spec in block.fields
            if spec.secret
            and spec.for_operation(operation).is_required(operation)
            and is_active(spec.condition, view, context)
            and is_empty(values.get(spec.id))
        ]
        if missing:
            raise MissingCredential(missing)


def _operation_of(block: BlockConfig, values: Mapping[str, Any]) -> Optional[str]:
    if not block.operation_field:
        return None
    operation = values.get(block.operation_field)
    return operation.strip() if isinstance(operation, str) else operation
