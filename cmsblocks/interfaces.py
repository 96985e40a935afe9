"""Narrow capabilities the view blocks depend on."""

from __future__ import annotations

from typing import Any, Protocol

from .models import CmsBlock, Store


class BlockLookup(Protocol):
    def execute(self, identifier: str, store_id: int) -> CmsBlock:
        """Return the block or raise NoSuchEntityError."""
        ...


class StoreResolver(Protocol):
    def get_store(self, store: int | str | None = None) -> Store:
        ...


class ContentFilter(Protocol):
    def set_store_id(self, store_id: int) -> "ContentFilter":
        ...

    def filter(self, content: str) -> str:
        ...


class FilterProvider(Protocol):
    def get_block_filter(self) -> ContentFilter:
        ...


class EventDispatcher(Protocol):
    def dispatch(self, event_name: str, **data: Any) -> None:
        ...


__all__ = [
    "BlockLookup",
    "ContentFilter",
    "EventDispatcher",
    "FilterProvider",
    "StoreResolver",
]
