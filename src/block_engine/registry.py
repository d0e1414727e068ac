"""
Block registry backed by YAML block definitions.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml
from pydantic import ValidationError

from block_model import BlockConfig
from .errors import BlockDefinitionError, UnknownBlockType

DEFINITIONS_DIR = Path(__file__).resolve().parent / "definitions"


class BlockRegistry:
    """Read-only catalogue of block types"""

    def __init__(self, blocks: Iterable[BlockConfig] = ()):
        self._blocks: Dict[str, BlockConfig] = {}
        for block in blocks:
            self.register(block)

    @classmethod
    def from_directory(cls, directory: Optional[Union[str, Path]] = None) -> "BlockRegistry":
        """
        Load every `*.yml` / `*.yaml` definition in a directory.

        Args:
            directory: Definitions directory; the packaged definitions when omitted

        Returns:
            BlockRegistry with one entry per file
        """
        definitions_dir = Path(directory) if directory is not None else DEFINITIONS_DIR
        if not definitions_dir.is_dir():
            raise BlockDefinitionError(definitions_dir, "definitions directory does not exist")
        paths = sorted(list(definitions_dir.glob("*.yml")) + list(definitions_dir.glob("*.yaml")))
        return cls(cls.load_file(path) for path in paths)

    @staticmethod
    def load_file(path: Union[str, Path]) -> BlockConfig:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise BlockDefinitionError(path, f"read failed: {e}") from e
        except yaml.YAMLError as e:
            raise BlockDefinitionError(path, f"yaml parse error: {e}") from e

        if not isinstance(data, dict):
            raise BlockDefinitionError(path, "top-level YAML must be a mapping")

        try:
            return BlockConfig.model_validate(data)
        except ValidationError as e:
            err_list = [f"{' -> '.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
            raise BlockDefinitionError(path, "; ".join(err_list)) from e

    def register(self, block: BlockConfig) -> None:
        if block.type in self._blocks:
            raise ValueError(f"Block type '{block.type}' is already registered")
        self._blocks[block.type] = block

    def get(self, block_type: str) -> BlockConfig:
        block = self._blocks.get(block_type)
        if block is None:
            raise UnknownBlockType(block_type)
        return block

    def find(self, block_type: str) -> Optional[BlockConfig]:
        return self._blocks.get(block_type)

    def types(self) -> List[str]:
        return sorted(self._blocks)

    def __contains__(self, block_type: object) -> bool:
        return block_type in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)
