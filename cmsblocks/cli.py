"""Command-line interface for rendering CMS blocks."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from jinja2 import UndefinedError

from .block_store import BlockRepository, GetBlockByIdentifier
from .events import EventManager
from .exceptions import NoSuchEntityError, TemplateFilterError
from .io_utils import warn
from .scope_config import ScopeConfig, load_app_config
from .stores import StoreManager
from .template_filter import FilterProvider
from .view import BlockByIdentifier, Context


@dataclass
class Services:
    repository: BlockRepository
    store_manager: StoreManager
    scope_config: ScopeConfig
    filter_provider: FilterProvider
    event_manager: EventManager

    def block_by_identifier(self, identifier: str | None) -> BlockByIdentifier:
        return BlockByIdentifier(
            GetBlockByIdentifier(self.repository),
            self.store_manager,
            self.filter_provider,
            Context(event_manager=self.event_manager, scope_config=self.scope_config),
            {"identifier": identifier},
        )


def load_services(blocks_dir: Path, config_path: Path, store: str | None = None) -> Services:
    """Wire the file-backed collaborators from a blocks directory and app config."""

    try:
        config = load_app_config(config_path)
        repository = BlockRepository.load(blocks_dir)
        store_manager = StoreManager.from_config(config)
        if store is not None:
            store_manager.set_current_store(store)
    except (FileNotFoundError, ValueError, NoSuchEntityError) as exc:
        raise SystemExit(str(exc)) from exc

    scope_config = ScopeConfig.from_config(config)
    return Services(
        repository=repository,
        store_manager=store_manager,
        scope_config=scope_config,
        filter_provider=FilterProvider(store_manager, scope_config),
        event_manager=EventManager(),
    )


def _services_from_args(args: argparse.Namespace) -> Services:
    return load_services(args.blocks, args.config, args.store)


def _handle_render(args: argparse.Namespace) -> None:
    services = _services_from_args(args)
    block = services.block_by_identifier(args.identifier)
    try:
        html_text = block.to_html()
    except (TemplateFilterError, UndefinedError) as exc:
        raise SystemExit(f"Block '{args.identifier}' could not be rendered: {exc}") from exc
    if not html_text:
        warn(f"Block '{args.identifier}' rendered empty output.")
    print(html_text)
    if args.identities:
        print(json.dumps(block.get_identities(), ensure_ascii=False))


def _handle_list(args: argparse.Namespace) -> None:
    services = _services_from_args(args)
    store = services.store_manager.get_store()
    for block in services.repository.iter_blocks(store.id):
        status = "" if block.is_active else " (disabled)"
        print(f"{block.id}\t{block.identifier}{status}")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--blocks",
        default=Path("content/blocks"),
        type=Path,
        help="Directory containing block JSON files.",
    )
    parser.add_argument(
        "--config",
        default=Path("config/app.yaml"),
        type=Path,
        help="Path to app.yaml with stores and scoped config.",
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Store code to render for (defaults to the configured default store).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render CMS blocks by identifier.")
    parser.add_argument(
        "--version",
        action="version",
        version="cmsblocks 0.1.0",
        help="Show the cmsblocks version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    render_parser = subparsers.add_parser("render", help="Render one block as HTML.")
    render_parser.add_argument("identifier", help="Identifier of the block to render.")
    render_parser.add_argument(
        "--identities",
        action="store_true",
        help="Also print the cache identities of the rendered output as JSON.",
    )
    _add_common_arguments(render_parser)
    render_parser.set_defaults(func=_handle_render)

    list_parser = subparsers.add_parser("list", help="List blocks visible in a store.")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=_handle_list)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help(file=sys.stderr)


__all__ = ["Services", "build_parser", "load_services", "main"]


if __name__ == "__main__":
    main()
