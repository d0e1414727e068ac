from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class WorkflowBlock(BaseModel):
    """Block instance placed in a workflow"""
    id: str = Field(min_length=1)
    type: str = Field(min_length=1, description="Block type, key into the block registry")
    name: str = Field(default="", description="Title given to the instance by the user")
    description: Optional[str] = Field(default=None, description="Overrides the block type description")
    values: Dict[str, Any] = Field(default_factory=dict, description="Current field values")
    state: Optional[Dict[str, Any]] = Field(default=None, description="Runtime state, if any")


class Connection(BaseModel):
    """Directed connection between two block instances"""
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    source_handle: str = Field(default="source")


class WorkflowGraph(BaseModel):
    """Snapshot of a workflow graph"""
    blocks: List[WorkflowBlock] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_graph_structure(self):
        """Validate ids are unique and connections reference existing blocks"""
        block_ids = [block.id for block in self.blocks]
        if len(block_ids) != len(set(block_ids)):
            raise ValueError('block ids must be unique')
        known = set(block_ids)
        for connection in self.connections:
            if connection.source not in known:
                raise ValueError(f'Connection source "{connection.source}" references non-existent block')
            if connection.target not in known:
                raise ValueError(f'Connection target "{connection.target}" references non-existent block')
        return self

    def get_block(self, block_id: str) -> Optional[WorkflowBlock]:
        for block in self.blocks:
            if block.id == block_id:
                return block
        return None

    def outgoing(self, block_id: str) -> List[WorkflowBlock]:
        """Targets of a block's outgoing connections, in connection order, without repeats"""
        targets: List[WorkflowBlock] = []
        seen = set()
        for connection in self.connections:
            if connection.source != block_id or connection.target in seen:
                continue
            seen.add(connection.target)
            target = self.get_block(connection.target)
            if target is not None:
                targets.append(target)
        return targets
