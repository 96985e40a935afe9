"""Minimal synchronous event dispatch for view blocks."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

BLOCK_TO_HTML_BEFORE = "view_block_abstract_to_html_before"
BLOCK_TO_HTML_AFTER = "view_block_abstract_to_html_after"


@dataclass
class Event:
    name: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Transport:
    """Mutable holder so observers can rewrite rendered HTML."""

    html: str = ""


Observer = Callable[[Event], None]


class EventManager:
    def __init__(self) -> None:
        self._observers: Dict[str, List[Observer]] = defaultdict(list)

    def add_observer(self, event_name: str, observer: Observer) -> None:
        self._observers[event_name].append(observer)

    def dispatch(self, event_name: str, **data: Any) -> None:
        """Call observers in registration order; their errors propagate."""

        event = Event(name=event_name, data=data)
        for observer in list(self._observers.get(event_name, [])):
            observer(event)
