"""
Action registry for lifecycle hooks.

Host code fires named actions with ``do_action``; the shell uses
``did_action`` and ``add_action`` to defer its start until an action fires.
"""

from typing import Any, Callable, Dict, List, Tuple

DEFAULT_PRIORITY = 10


class ActionRegistry:
    """
    Registry of action callbacks.

    Tracks callbacks per action name and how many times each action fired.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._callbacks: Dict[str, List[Tuple[int, int, Callable]]] = {}
        self._fired: Dict[str, int] = {}
        self._sequence = 0

    def add_action(
        self,
        name: str,
        callback: Callable,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        """
        Register a callback for an action.

        Args:
            name: Action name
            callback: Called with the arguments passed to do_action
            priority: Lower runs first; equal priorities run in registration order
        """
        self._sequence += 1
        self._callbacks.setdefault(name, []).append((priority, self._sequence, callback))

    def do_action(self, name: str, *args: Any) -> None:
        """
        Fire an action.

        The fire count is incremented before callbacks run, so callbacks
        observe the action as fired.

        Args:
            name: Action name
            *args: Arguments passed to every callback
        """
        self._fired[name] = self._fired.get(name, 0) + 1
        for _, _, callback in sorted(self._callbacks.get(name, []), key=lambda c: c[:2]):
            callback(*args)

    def did_action(self, name: str) -> int:
        """
        Get how many times an action fired.

        Args:
            name: Action name

        Returns:
            Fire count (0 if never fired)
        """
        return self._fired.get(name, 0)


# Global registry instance
_global_actions = ActionRegistry()


def get_global_actions() -> ActionRegistry:
    """
    Get the global action registry.

    Returns:
        Global ActionRegistry instance
    """
    return _global_actions


def add_action(name: str, callback: Callable, priority: int = DEFAULT_PRIORITY) -> None:
    _global_actions.add_action(name, callback, priority)


def do_action(name: str, *args: Any) -> None:
    _global_actions.do_action(name, *args)


def did_action(name: str) -> int:
    return _global_actions.did_action(name)
