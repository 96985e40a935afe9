"""Template filtering of block content through Jinja."""

from __future__ import annotations

from typing import Any, Optional

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError

from .exceptions import TemplateFilterError
from .models import Store
from .scope_config import SCOPE_STORE, ScopeConfig
from .stores import StoreManager


def _join_url(base: str, path: str) -> str:
    if not path:
        return base
    return base.rstrip("/") + "/" + path.lstrip("/")


class BlockTemplateFilter:
    """Render block content as a template scoped to one store.

    Content is trusted markup: only expression output is escaped, literal HTML
    in the block passes through untouched. Content without template syntax is
    returned unchanged.
    """

    def __init__(self, store_manager: StoreManager, scope_config: ScopeConfig) -> None:
        self.store_manager = store_manager
        self.scope_config = scope_config
        self._store_id: Optional[int] = None
        self.env = Environment(
            autoescape=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def set_store_id(self, store_id: int) -> "BlockTemplateFilter":
        self._store_id = store_id
        return self

    @property
    def store_id(self) -> Optional[int]:
        return self._store_id

    def _store(self) -> Store:
        return self.store_manager.get_store(self._store_id)

    def _globals(self, store: Store) -> dict[str, Any]:
        media_base = store.media_url or _join_url(store.base_url, "media/")
        return {
            "store": store,
            "store_url": lambda path="": _join_url(store.base_url, path),
            "media_url": lambda path="": _join_url(media_base, path),
            "config": lambda path: self.scope_config.get_value(path, SCOPE_STORE, store.code),
        }

    def filter(self, content: str) -> str:
        try:
            template = self.env.from_string(content)
        except TemplateSyntaxError as exc:
            raise TemplateFilterError(f"Invalid template in block content: {exc}") from exc
        return template.render(**self._globals(self._store()))


class FilterProvider:
    """Hands out the shared filter used for block content."""

    def __init__(self, store_manager: StoreManager, scope_config: ScopeConfig) -> None:
        self.store_manager = store_manager
        self.scope_config = scope_config
        self._block_filter: BlockTemplateFilter | None = None

    def get_block_filter(self) -> BlockTemplateFilter:
        if self._block_filter is None:
            self._block_filter = BlockTemplateFilter(self.store_manager, self.scope_config)
        return self._block_filter
