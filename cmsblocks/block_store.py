"""File-backed CMS block repository and identifier lookup."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional

from pydantic import ValidationError

from .exceptions import NoSuchEntityError
from .io_utils import read_json
from .models import ALL_STORES_ID, CmsBlock


@dataclass
class BlockRepository:
    blocks_by_id: Dict[int, CmsBlock]

    @classmethod
    def load(cls, blocks_dir: Path) -> "BlockRepository":
        """Load and validate every blocks_dir/*.json file."""

        if not blocks_dir.exists():
            raise FileNotFoundError(f"Blocks directory not found: {blocks_dir}")

        blocks_by_id: Dict[int, CmsBlock] = {}
        for path in sorted(blocks_dir.glob("*.json")):
            try:
                block = CmsBlock.model_validate(read_json(path))
            except (json.JSONDecodeError, ValidationError) as exc:
                raise ValueError(f"Invalid block file {path}: {exc}") from exc
            if block.id in blocks_by_id:
                raise ValueError(f"Duplicate block id {block.id} in {path}")
            blocks_by_id[block.id] = block
        return cls(blocks_by_id=blocks_by_id)

    def get_by_id(self, block_id: int) -> CmsBlock:
        try:
            return self.blocks_by_id[block_id]
        except KeyError:
            raise NoSuchEntityError(
                f'The CMS block with the "{block_id}" ID doesn\'t exist.'
            ) from None

    def iter_blocks(self, store_id: Optional[int] = None) -> Iterator[CmsBlock]:
        for block_id in sorted(self.blocks_by_id):
            block = self.blocks_by_id[block_id]
            if store_id is None or block.is_visible_in(store_id):
                yield block


class GetBlockByIdentifier:
    """Resolve a block by identifier within a store."""

    def __init__(self, repository: BlockRepository) -> None:
        self.repository = repository

    def execute(self, identifier: str, store_id: int) -> CmsBlock:
        candidates = [
            block
            for block in self.repository.iter_blocks(store_id)
            if block.identifier == identifier
        ]
        if not candidates:
            raise NoSuchEntityError(
                f'The CMS block with the "{identifier}" ID doesn\'t exist.'
            )
        # Blocks assigned to the store explicitly win over "all stores" ones.
        specific = [block for block in candidates if store_id in block.store_ids]
        if specific and store_id != ALL_STORES_ID:
            return specific[0]
        return candidates[0]
