"""Caller-side holder for the committed expression list."""

from typing import Callable, Iterable, Iterator

from filterbox.domain.types import FilterExpression

__all__ = ["ExpressionStore", "StoreListener"]

StoreListener = Callable[[tuple[FilterExpression, ...]], None]


class ExpressionStore:
    """An ordered, immutable snapshot of expressions plus change listeners.

    The engine never writes into a list it was handed; it reports each new
    list through ``on_change``. Passing :meth:`replace` as that callback
    makes a store the owner of record:

        >>> store = ExpressionStore()
        >>> engine = FilterEngine(schema, on_change=store.replace)
    """

    def __init__(self, expressions: Iterable[FilterExpression] = ()):
        self._expressions: tuple[FilterExpression, ...] = tuple(expressions)
        self._listeners: list[StoreListener] = []

    @property
    def expressions(self) -> tuple[FilterExpression, ...]:
        return self._expressions

    def replace(self, expressions: Iterable[FilterExpression]) -> None:
        snapshot = tuple(expressions)
        if snapshot == self._expressions:
            return
        self._expressions = snapshot
        for listener in list(self._listeners):
            listener(snapshot)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._expressions)

    def __iter__(self) -> Iterator[FilterExpression]:
        return iter(self._expressions)

    def __getitem__(self, index: int) -> FilterExpression:
        return self._expressions[index]
