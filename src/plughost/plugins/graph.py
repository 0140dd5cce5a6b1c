"""Dependency resolution for plugin activation.

:class:`DependencyGraph` is a small synchronous scheduler. Every registration
parks a waiter holding the names it depends on; :meth:`DependencyGraph.resolve`
records a value for a name and fires each waiter whose dependencies are now
all resolved. Completion callbacks run on the caller's stack, so an error
raised while activating a plugin reaches whoever triggered the resolution.

A waiter whose dependencies never resolve (unknown plugin, cycle) simply
stays parked. :meth:`DependencyGraph.pending` and
:meth:`DependencyGraph.cycles` report such stalls without altering them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

_UNSET = object()


class Deferred:
    """Result of :meth:`DependencyGraph.add`, completed with ``{dep: value}``.

    Callbacks added after completion run immediately.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._result: Any = _UNSET
        self._callbacks: list[Callable[["Deferred"], None]] = []

    def done(self) -> bool:
        return self._result is not _UNSET

    def result(self) -> dict[str, Any]:
        """Return the resolved dependency values.

        Raises:
            RuntimeError: If the deferred has not completed yet.
        """
        if self._result is _UNSET:
            raise RuntimeError(f"Dependencies of '{self.name}' are not resolved yet")
        return self._result

    def add_done_callback(self, callback: Callable[["Deferred"], None]) -> None:
        if self.done():
            callback(self)
        else:
            self._callbacks.append(callback)

    def set_result(self, value: dict[str, Any]) -> None:
        if self.done():
            raise RuntimeError(f"Deferred for '{self.name}' already completed")
        self._result = value
        callbacks, self._callbacks = self._callbacks, []
        _run_all((callback, self) for callback in callbacks)


@dataclass
class _Waiter:
    name: str
    dependencies: tuple[str, ...]
    deferred: Deferred = field(repr=False)


class DependencyGraph:
    """Tracks named nodes, their required predecessors and resolved values.

    Example::

        graph = DependencyGraph()
        deferred = graph.add("B", ["A"])
        deferred.add_done_callback(lambda d: print(d.result()))
        graph.resolve("A", 42)  # prints {'A': 42}
    """

    def __init__(self) -> None:
        self._resolved: dict[str, Any] = {}
        self._waiters: list[_Waiter] = []

    def add(self, name: str, dependencies: Iterable[str]) -> Deferred:
        """Park *name* until every entry of *dependencies* is resolved."""
        waiter = _Waiter(name, tuple(dependencies), Deferred(name))
        if self._is_ready(waiter):
            waiter.deferred.set_result(self._values_for(waiter))
        else:
            self._waiters.append(waiter)
            logger.debug(
                "'%s' waiting on %s", name, ", ".join(self._missing_for(waiter))
            )
        return waiter.deferred

    def resolve(self, name: str, value: Any) -> None:
        """Record *value* for *name* and complete every waiter now satisfied.

        All ready waiters are completed even if one of their callbacks
        raises; the first error is then re-raised.
        """
        self._resolved[name] = value
        ready: list[_Waiter] = []
        parked: list[_Waiter] = []
        for waiter in self._waiters:
            (ready if self._is_ready(waiter) else parked).append(waiter)
        if not ready:
            return
        self._waiters = parked
        _run_all((w.deferred.set_result, self._values_for(w)) for w in ready)

    def is_resolved(self, name: str) -> bool:
        return name in self._resolved

    def value(self, name: str, default: Any = None) -> Any:
        return self._resolved.get(name, default)

    def pending(self) -> dict[str, list[str]]:
        """Map each parked registration to the dependencies it still waits for."""
        return {w.name: self._missing_for(w) for w in self._waiters}

    def cycles(self) -> list[list[str]]:
        """Return dependency cycles among parked registrations.

        Each cycle is listed once, starting from the name encountered first.
        """
        edges = {w.name: self._missing_for(w) for w in self._waiters}
        cycles: list[list[str]] = []
        seen: set[frozenset[str]] = set()
        visited: set[str] = set()

        def visit(node: str, path: list[str]) -> None:
            if node in path:
                cycle = path[path.index(node):]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
                return
            if node in visited or node not in edges:
                return
            for dep in edges[node]:
                visit(dep, path + [node])
            visited.add(node)

        for name in edges:
            visit(name, [])
        return cycles

    def clear(self) -> None:
        """Forget every resolved value and parked waiter."""
        self._resolved.clear()
        self._waiters.clear()

    def _is_ready(self, waiter: _Waiter) -> bool:
        return all(dep in self._resolved for dep in waiter.dependencies)

    def _missing_for(self, waiter: _Waiter) -> list[str]:
        return [d for d in waiter.dependencies if d not in self._resolved]

    def _values_for(self, waiter: _Waiter) -> dict[str, Any]:
        return {dep: self._resolved[dep] for dep in waiter.dependencies}


def _run_all(calls: Iterable[tuple[Callable[[Any], None], Any]]) -> None:
    """Invoke every ``(func, arg)`` pair, then re-raise the first failure."""
    first_error: Optional[BaseException] = None
    for func, arg in calls:
        try:
            func(arg)
        except Exception as exc:
            if first_error is None:
                first_error = exc
            else:
                logger.error("Additional error while resolving dependencies", exc_info=exc)
    if first_error is not None:
        raise first_error
