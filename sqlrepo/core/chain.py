"""Immutable ordered chains of column mapper factories and parameter converters."""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Generic, Optional, Protocol, TypeVar

from sqlrepo.utils.logging import get_logger

__all__ = ("LOWEST_PRIORITY", "PluginChain", "PrioritizedPlugin", "build_chain")

LOWEST_PRIORITY = 2**31 - 1
"""Priority of the catch-all plugins; consulted last."""

logger = get_logger("core.chain")


class PrioritizedPlugin(Protocol):
    priority: int

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool: ...


PluginT = TypeVar("PluginT", bound=PrioritizedPlugin)


class PluginChain(Generic[PluginT]):
    """Plugins sorted by ascending priority, ties broken by registration order.

    The chain is a tuple built once; resolution walks it and returns the first
    plugin accepting the requested type.
    """

    __slots__ = ("_plugins",)

    def __init__(self, plugins: "Iterable[PluginT]" = ()) -> None:
        indexed = list(enumerate(plugins))
        indexed.sort(key=lambda item: (item[1].priority, item[0]))
        self._plugins: tuple[PluginT, ...] = tuple(plugin for _, plugin in indexed)

    def __iter__(self) -> "Iterator[PluginT]":
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __getitem__(self, index: int) -> PluginT:
        return self._plugins[index]

    def __repr__(self) -> str:
        names = ", ".join(f"{type(p).__name__}({p.priority})" for p in self._plugins)
        return f"{type(self).__name__}([{names}])"

    def find(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> Optional[PluginT]:
        """Return the first plugin accepting ``target_type``, or None."""
        for plugin in self._plugins:
            if plugin.accept(target_type, annotations):
                return plugin
        return None


def build_chain(
    defaults: "Iterable[PluginT]",
    additional: "Iterable[PluginT]" = (),
    exclude: "Iterable[type[Any]]" = (),
    *,
    use_defaults: bool = True,
    kind: str = "plugin",
) -> "PluginChain[PluginT]":
    """Assemble a chain from default and additional plugins.

    Args:
        defaults: Built-in plugins.
        additional: Plugins supplied by the caller; registered after the defaults.
        exclude: Plugin classes removed from ``defaults``.
        use_defaults: When False, ``defaults`` are ignored entirely.
        kind: Label used in log messages.

    Returns:
        The immutable chain.
    """
    excluded = tuple(exclude)
    base = [p for p in defaults if not isinstance(p, excluded)] if use_defaults else []
    chain: PluginChain[PluginT] = PluginChain([*base, *additional])
    seen: dict[int, PluginT] = {}
    for plugin in chain:
        previous = seen.get(plugin.priority)
        if previous is not None:
            logger.debug(
                "%s %s shares priority %d with %s; registration order decides",
                kind,
                type(plugin).__name__,
                plugin.priority,
                type(previous).__name__,
            )
        else:
            seen[plugin.priority] = plugin
    logger.debug("Assembled %s chain %r", kind, chain)
    return chain
