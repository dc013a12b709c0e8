"""
Event hooks for database operations.

Events: 'query', 'error', 'transaction.begin', 'transaction.commit',
'transaction.rollback'.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List

HookCallback = Callable[[Dict[str, Any]], Any]

EVENTS = (
    "query",
    "error",
    "transaction.begin",
    "transaction.commit",
    "transaction.rollback",
)


class HookRegistry:
    """
    Ordered listener lists keyed by event name.

    Listeners are called synchronously, in registration order, with the
    event payload dict. Triggering an event nobody listens to is a no-op.
    """

    def __init__(self):
        self._hooks: Dict[str, List[HookCallback]] = defaultdict(list)

    def on(self, event: str, callback: HookCallback) -> None:
        """
        Register a callback for an event.

        Args:
            event: Event name
            callback: Callable receiving the event payload dict
        """
        self._hooks[event].append(callback)

    def trigger(self, event: str, payload: Dict[str, Any]) -> None:
        """Call every listener registered for ``event``."""
        for callback in list(self._hooks.get(event, ())):
            callback(payload)

    def listeners(self, event: str) -> List[HookCallback]:
        return list(self._hooks.get(event, ()))
