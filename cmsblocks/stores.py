"""Store resolution for the current request."""

from __future__ import annotations

from typing import Dict, List

from .exceptions import NoSuchEntityError
from .models import AppConfig, Store


class StoreManager:
    """Holds the known stores and which one is current."""

    def __init__(self, stores: List[Store], current_store: str | int) -> None:
        if not stores:
            raise ValueError("At least one store is required")
        self._by_id: Dict[int, Store] = {}
        self._by_code: Dict[str, Store] = {}
        for store in stores:
            if store.id in self._by_id or store.code in self._by_code:
                raise ValueError(f"Duplicate store '{store.code}' (id {store.id})")
            self._by_id[store.id] = store
            self._by_code[store.code] = store
        self._current = self._resolve(current_store)

    @classmethod
    def from_config(cls, config: AppConfig) -> "StoreManager":
        return cls(config.stores, config.default_store)

    def _resolve(self, store: str | int) -> Store:
        found = self._by_id.get(store) if isinstance(store, int) else self._by_code.get(store)
        if found is None:
            raise NoSuchEntityError(f"The store that was requested wasn't found: {store!r}")
        if not found.is_active:
            raise NoSuchEntityError(f"The store that was requested is disabled: {store!r}")
        return found

    def get_store(self, store: str | int | None = None) -> Store:
        """Return the requested store, or the current one when store is None."""

        if store is None:
            return self._current
        return self._resolve(store)

    def set_current_store(self, store: str | int) -> None:
        self._current = self._resolve(store)

    def get_stores(self) -> List[Store]:
        return [self._by_id[store_id] for store_id in sorted(self._by_id)]
