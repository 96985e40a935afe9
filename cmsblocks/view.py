"""View blocks rendered inside a page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .events import BLOCK_TO_HTML_AFTER, BLOCK_TO_HTML_BEFORE, Transport
from .exceptions import NoSuchEntityError
from .interfaces import BlockLookup, EventDispatcher, FilterProvider, StoreResolver
from .models import CmsBlock
from .scope_config import SCOPE_STORE, XML_PATH_MODULE_OUTPUT_DISABLED, ScopeConfig


@dataclass
class Context:
    """Collaborators shared by every view block."""

    event_manager: EventDispatcher
    scope_config: ScopeConfig


class AbstractBlock:
    """Base view block: output toggle, render events and block data."""

    def __init__(self, context: Context, data: Optional[Dict[str, Any]] = None) -> None:
        self.context = context
        self._data: Dict[str, Any] = dict(data or {})

    def get_data(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set_data(self, key: str, value: Any) -> "AbstractBlock":
        self._data[key] = value
        return self

    def _output_scope_code(self) -> str | int | None:
        return None

    def _is_output_disabled(self) -> bool:
        return self.context.scope_config.is_set_flag(
            XML_PATH_MODULE_OUTPUT_DISABLED, SCOPE_STORE, self._output_scope_code()
        )

    def to_html(self) -> str:
        if self._is_output_disabled():
            return ""
        events = self.context.event_manager
        events.dispatch(BLOCK_TO_HTML_BEFORE, block=self)
        transport = Transport(html=self._to_html())
        events.dispatch(BLOCK_TO_HTML_AFTER, block=self, transport=transport)
        return transport.html

    def _to_html(self) -> str:
        return ""

    def get_identities(self) -> List[str]:
        return []


class BlockByIdentifier(AbstractBlock):
    """Render a CMS block looked up by identifier in the current store.

    A missing, unknown or disabled block renders as an empty string. The
    lookup happens at most once per store and its outcome is reused by both
    ``to_html`` and ``get_identities``.
    """

    CACHE_KEY_PREFIX = "CMS_BLOCK"

    def __init__(
        self,
        get_block_by_identifier: BlockLookup,
        store_manager: StoreResolver,
        filter_provider: FilterProvider,
        context: Context,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(context, data)
        self.get_block_by_identifier = get_block_by_identifier
        self.store_manager = store_manager
        self.filter_provider = filter_provider
        self._lookups: Dict[int, CmsBlock | NoSuchEntityError] = {}

    def get_identifier(self) -> Optional[str]:
        identifier = self.get_data("identifier")
        return str(identifier) if identifier else None

    def _current_store_id(self) -> int:
        return int(self.store_manager.get_store().id)

    def _output_scope_code(self) -> str | int | None:
        return self.store_manager.get_store().code

    def _get_cms_block(self, identifier: str) -> CmsBlock:
        store_id = self._current_store_id()
        if store_id not in self._lookups:
            try:
                block = self.get_block_by_identifier.execute(identifier, store_id)
                if not block.is_active:
                    raise NoSuchEntityError(
                        f'The CMS block with identifier "{identifier}" is not enabled.'
                    )
            except NoSuchEntityError as exc:
                self._lookups[store_id] = exc
                raise
            self._lookups[store_id] = block
        outcome = self._lookups[store_id]
        if isinstance(outcome, NoSuchEntityError):
            raise outcome
        return outcome

    def _to_html(self) -> str:
        identifier = self.get_identifier()
        if identifier is None:
            return ""
        try:
            block = self._get_cms_block(identifier)
        except NoSuchEntityError:
            return ""
        block_filter = self.filter_provider.get_block_filter()
        return block_filter.set_store_id(self._current_store_id()).filter(block.content)

    def get_identities(self) -> List[str]:
        identifier = self.get_identifier()
        if identifier is None:
            return []
        store_id = self._current_store_id()
        identities = [
            f"{self.CACHE_KEY_PREFIX}_{identifier}",
            f"{self.CACHE_KEY_PREFIX}_{identifier}_{store_id}",
        ]
        try:
            block = self._get_cms_block(identifier)
        except NoSuchEntityError:
            return identities
        identities.append(f"{self.CACHE_KEY_PREFIX}_{block.id}")
        identities.extend(key for key in block.get_identities() if key not in identities)
        return identities
