from unittest import mock

import pytest

from cmsblocks.events import BLOCK_TO_HTML_AFTER, BLOCK_TO_HTML_BEFORE, EventManager
from cmsblocks.exceptions import NoSuchEntityError
from cmsblocks.models import CmsBlock, ScopedConfigValues, Store
from cmsblocks.scope_config import XML_PATH_MODULE_OUTPUT_DISABLED, ScopeConfig
from cmsblocks.stores import StoreManager
from cmsblocks.view import AbstractBlock, BlockByIdentifier, Context

EXISTING_IDENTIFIER = "existingOne"
UNAVAILABLE_IDENTIFIER = "notExists"
DEFAULT_STORE = 1
CMS_BLOCK_ID = 1
CONTENT = "Content"

PREFIX = BlockByIdentifier.CACHE_KEY_PREFIX


class FakeStoreManager:
    def __init__(self, store_id: int = DEFAULT_STORE) -> None:
        self.store = Store(id=store_id, code="default", name="Default Store View")

    def get_store(self, store=None) -> Store:
        return self.store


class PassthroughFilter:
    """Returns content unchanged and records the store id seen at filter time."""

    def __init__(self) -> None:
        self.store_id = None
        self.filtered_with: list = []

    def set_store_id(self, store_id: int) -> "PassthroughFilter":
        self.store_id = store_id
        return self

    def filter(self, content: str) -> str:
        self.filtered_with.append(self.store_id)
        return content


class FakeFilterProvider:
    def __init__(self) -> None:
        self.block_filter = PassthroughFilter()

    def get_block_filter(self) -> PassthroughFilter:
        return self.block_filter


def _cms_block(block_id=CMS_BLOCK_ID, identifier=EXISTING_IDENTIFIER, content=CONTENT, **extra):
    return CmsBlock(id=block_id, identifier=identifier, content=content, **extra)


def _lookup_returning(block: CmsBlock) -> mock.Mock:
    lookup = mock.Mock()
    lookup.execute.return_value = block
    return lookup


def _lookup_raising(exc: Exception) -> mock.Mock:
    lookup = mock.Mock()
    lookup.execute.side_effect = exc
    return lookup


def _tested_block(
    identifier,
    lookup,
    *,
    filter_provider=None,
    scope_config=None,
    event_manager=None,
):
    context = Context(
        event_manager=event_manager or EventManager(),
        scope_config=scope_config or ScopeConfig(),
    )
    return BlockByIdentifier(
        lookup,
        FakeStoreManager(),
        filter_provider or FakeFilterProvider(),
        context,
        {"identifier": identifier},
    )


def test_block_returns_empty_string_when_no_identifier_provided():
    lookup = mock.Mock()
    block = _tested_block(None, lookup)

    assert block.to_html() == ""
    assert block.get_identities() == []
    lookup.execute.assert_not_called()


def test_block_returns_empty_string_when_identifier_not_found():
    lookup = _lookup_raising(NoSuchEntityError("NoSuchEntityException"))
    block = _tested_block(UNAVAILABLE_IDENTIFIER, lookup)

    assert block.to_html() == ""
    assert block.get_identities() == [
        f"{PREFIX}_{UNAVAILABLE_IDENTIFIER}",
        f"{PREFIX}_{UNAVAILABLE_IDENTIFIER}_{DEFAULT_STORE}",
    ]


def test_block_returns_cms_contents_when_identifier_found():
    lookup = _lookup_returning(_cms_block())
    block = _tested_block(EXISTING_IDENTIFIER, lookup)

    assert block.to_html() == CONTENT
    lookup.execute.assert_called_once_with(EXISTING_IDENTIFIER, DEFAULT_STORE)


def test_block_cache_identities_contain_explicit_scope_information():
    lookup = _lookup_returning(_cms_block())
    block = _tested_block(EXISTING_IDENTIFIER, lookup)

    identities = block.get_identities()

    assert f"{PREFIX}_{CMS_BLOCK_ID}" in identities
    assert f"{PREFIX}_{EXISTING_IDENTIFIER}_{DEFAULT_STORE}" in identities


def test_cache_key_prefix_value():
    assert BlockByIdentifier.CACHE_KEY_PREFIX == "CMS_BLOCK"


def test_identities_include_entity_cache_tags_in_order():
    block = _tested_block(EXISTING_IDENTIFIER, _lookup_returning(_cms_block(block_id=7)))

    assert block.get_identities() == [
        "CMS_BLOCK_existingOne",
        "CMS_BLOCK_existingOne_1",
        "CMS_BLOCK_7",
        "cms_b_7",
        "cms_b_existingOne",
    ]


def test_filter_has_store_id_set_before_filtering():
    provider = FakeFilterProvider()
    block = _tested_block(
        EXISTING_IDENTIFIER, _lookup_returning(_cms_block()), filter_provider=provider
    )

    block.to_html()

    assert provider.block_filter.filtered_with == [DEFAULT_STORE]


@pytest.mark.parametrize("identities_first", [True, False])
def test_lookup_runs_once_regardless_of_call_order(identities_first):
    lookup = _lookup_returning(_cms_block())
    block = _tested_block(EXISTING_IDENTIFIER, lookup)

    if identities_first:
        first_identities = block.get_identities()
        html = block.to_html()
    else:
        html = block.to_html()
        first_identities = block.get_identities()

    assert html == CONTENT
    assert block.get_identities() == first_identities
    assert lookup.execute.call_count == 1


def test_not_found_outcome_is_reused():
    lookup = _lookup_raising(NoSuchEntityError("missing"))
    block = _tested_block(UNAVAILABLE_IDENTIFIER, lookup)

    assert block.get_identities() == block.get_identities()
    assert block.to_html() == ""
    assert lookup.execute.call_count == 1


def test_inactive_block_is_treated_as_missing():
    lookup = _lookup_returning(_cms_block(is_active=False))
    block = _tested_block(EXISTING_IDENTIFIER, lookup)

    assert block.to_html() == ""
    assert block.get_identities() == [
        "CMS_BLOCK_existingOne",
        "CMS_BLOCK_existingOne_1",
    ]


def test_other_lookup_errors_propagate():
    block = _tested_block(EXISTING_IDENTIFIER, _lookup_raising(RuntimeError("db down")))

    with pytest.raises(RuntimeError, match="db down"):
        block.to_html()


def test_disabled_module_output_renders_nothing():
    scope_config = ScopeConfig(
        ScopedConfigValues(stores={"default": {XML_PATH_MODULE_OUTPUT_DISABLED: "1"}})
    )
    lookup = _lookup_returning(_cms_block())
    block = _tested_block(EXISTING_IDENTIFIER, lookup, scope_config=scope_config)

    assert block.to_html() == ""
    lookup.execute.assert_not_called()


def test_render_events_wrap_output():
    events = EventManager()
    seen = []
    events.add_observer(BLOCK_TO_HTML_BEFORE, lambda event: seen.append(event.name))

    def _wrap(event):
        seen.append(event.name)
        transport = event.data["transport"]
        transport.html = f"<div class=\"widget\">{transport.html}</div>"

    events.add_observer(BLOCK_TO_HTML_AFTER, _wrap)
    block = _tested_block(
        EXISTING_IDENTIFIER, _lookup_returning(_cms_block()), event_manager=events
    )

    assert block.to_html() == '<div class="widget">Content</div>'
    assert seen == [BLOCK_TO_HTML_BEFORE, BLOCK_TO_HTML_AFTER]


def test_identifier_can_be_set_after_construction():
    lookup = _lookup_returning(_cms_block())
    block = _tested_block(None, lookup)
    block.set_data("identifier", EXISTING_IDENTIFIER)

    assert block.get_identifier() == EXISTING_IDENTIFIER
    assert block.to_html() == CONTENT


def test_base_block_renders_empty_output():
    events = EventManager()
    seen = []
    events.add_observer(BLOCK_TO_HTML_AFTER, lambda event: seen.append(event.name))
    block = AbstractBlock(Context(event_manager=events, scope_config=ScopeConfig()))

    assert block.to_html() == ""
    assert block.get_identities() == []
    assert seen == [BLOCK_TO_HTML_AFTER]


def test_lookup_is_repeated_after_store_switch():
    store_manager = StoreManager(
        [
            Store(id=1, code="default", name="Default"),
            Store(id=2, code="fr", name="French"),
        ],
        "default",
    )
    blocks = {
        1: _cms_block(block_id=10, content="Hello"),
        2: _cms_block(block_id=20, content="Bonjour"),
    }
    lookup = mock.Mock()
    lookup.execute.side_effect = lambda identifier, store_id: blocks[store_id]
    block = BlockByIdentifier(
        lookup,
        store_manager,
        FakeFilterProvider(),
        Context(event_manager=EventManager(), scope_config=ScopeConfig()),
        {"identifier": EXISTING_IDENTIFIER},
    )

    assert block.to_html() == "Hello"
    assert f"{PREFIX}_10" in block.get_identities()

    store_manager.set_current_store("fr")

    assert block.to_html() == "Bonjour"
    identities = block.get_identities()
    assert identities[:3] == [
        f"{PREFIX}_{EXISTING_IDENTIFIER}",
        f"{PREFIX}_{EXISTING_IDENTIFIER}_2",
        f"{PREFIX}_20",
    ]
    assert f"{PREFIX}_10" not in identities
    assert lookup.execute.call_count == 2
