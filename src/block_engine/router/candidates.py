"""
Candidate destinations of a router, taken from the live workflow graph.
"""

from typing import List, Optional

from block_model import WorkflowGraph
from ..models import CandidateDestination
from ..registry import BlockRegistry


def candidates_from_workflow(
        graph: WorkflowGraph,
        router_id: str,
        registry: Optional[BlockRegistry] = None,
) -> List[CandidateDestination]:
    """
    Build the candidate set for a router block.

    Candidates are the targets of the router's outgoing connections, in
    connection order. Block type metadata (description, category) comes from
    the registry when the type is known there.

    Raises:
        ValueError: router_id is not a block of the graph
    """
    if graph.get_block(router_id) is None:
        raise ValueError(f"Block '{router_id}' not found in workflow")

    candidates: List[CandidateDestination] = []
    for target in graph.outgoing(router_id):
        block_config = registry.find(target.type) if registry is not None else None
        description = target.description
        secret_ids = set()
        if block_config is not None:
            if description is None:
                description = block_config.description
            secret_ids = {spec.id for spec in block_config.fields if spec.secret}
        # credentials never reach the model
        config = {key: value for key, value in target.values.items() if key not in secret_ids}
        candidates.append(CandidateDestination(
            id=target.id,
            type=target.type,
            title=target.name or (block_config.name if block_config is not None else None),
            description=description,
            category=block_config.category.value if block_config is not None else None,
            config=config or None,
            current_state=target.state,
        ))
    return candidates
