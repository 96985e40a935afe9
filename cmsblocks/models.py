"""Pydantic models for CMS blocks, stores and application configuration."""

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

ALL_STORES_ID = 0


class CmsBlock(BaseModel):
    """Schema for content/blocks/*.json files."""

    CACHE_TAG: ClassVar[str] = "cms_b"

    id: int = Field(..., description="Numeric entity id.")
    identifier: str = Field(
        ..., description="String key naming the block, unique within a store."
    )
    title: Optional[str] = Field(None, description="Admin-facing title.")
    content: str = Field("", description="Block body, may contain template syntax.")
    is_active: bool = Field(
        True, alias="isActive", description="Inactive blocks never render."
    )
    store_ids: List[int] = Field(
        default_factory=lambda: [ALL_STORES_ID],
        alias="storeIds",
        description="Stores the block is assigned to; 0 means every store.",
    )
    creation_time: Optional[str] = Field(
        None, alias="creationTime", description="ISO timestamp of creation."
    )
    update_time: Optional[str] = Field(
        None, alias="updateTime", description="ISO timestamp of the last update."
    )

    model_config = ConfigDict(populate_by_name=True)

    def is_visible_in(self, store_id: int) -> bool:
        return store_id in self.store_ids or ALL_STORES_ID in self.store_ids

    def get_identities(self) -> List[str]:
        """Cache tags owned by the block entity itself."""

        return [f"{self.CACHE_TAG}_{self.id}", f"{self.CACHE_TAG}_{self.identifier}"]


class Store(BaseModel):
    """A storefront that partitions content."""

    id: int = Field(..., description="Numeric store id.")
    code: str = Field(..., description="Slug-friendly store code.")
    name: str = Field(..., description="Human readable store name.")
    is_active: bool = Field(True, alias="isActive", description="Whether the store is open.")
    base_url: str = Field(
        "/", alias="baseUrl", description="Base URL used to build store links."
    )
    media_url: Optional[str] = Field(
        None,
        alias="mediaUrl",
        description="Base URL for media files; defaults to {baseUrl}media/.",
    )

    model_config = ConfigDict(populate_by_name=True)


class ScopedConfigValues(BaseModel):
    """Configuration values by scope."""

    default: Dict[str, Any] = Field(
        default_factory=dict, description="Values applied to every store."
    )
    stores: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-store overrides keyed by store code, then config path.",
    )


class AppConfig(BaseModel):
    """Top-level application configuration (config/app.yaml)."""

    default_store: str = Field(
        ..., alias="defaultStore", description="Code of the store used by default."
    )
    stores: List[Store] = Field(default_factory=list, description="Known stores.")
    config: ScopedConfigValues = Field(
        default_factory=ScopedConfigValues, description="Scoped configuration values."
    )

    model_config = ConfigDict(populate_by_name=True)


__all__ = [
    "ALL_STORES_ID",
    "AppConfig",
    "CmsBlock",
    "ScopedConfigValues",
    "Store",
]
