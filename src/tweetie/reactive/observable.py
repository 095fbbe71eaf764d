"""Synchronous push-based streams.

Every stream follows the same grammar: any number of ``on_next`` events,
optionally closed by exactly one ``on_error`` or ``on_completed``. Events are
delivered on the caller's thread, in order, before the emitting call returns.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from tweetie.reactive.disposables import Disposable

T = TypeVar("T")
R = TypeVar("R")

OnNext = Callable[[Any], None]
OnError = Callable[[BaseException], None]
OnCompleted = Callable[[], None]


class Observer(Generic[T]):
    """Callback triple that ignores events after a terminal one."""

    def __init__(
        self,
        on_next: OnNext | None = None,
        on_error: OnError | None = None,
        on_completed: OnCompleted | None = None,
    ) -> None:
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed
        self._stopped = False

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def on_next(self, value: T) -> None:
        if self._stopped:
            return
        if self._on_next is not None:
            self._on_next(value)

    def on_error(self, error: BaseException) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._on_error is None:
            raise error
        self._on_error(error)

    def on_completed(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._on_completed is not None:
            self._on_completed()


class _Sink(Observer[T]):
    """Observer bound to one subscription; releases it after a terminal event."""

    def __init__(self, downstream: Observer[T]) -> None:
        super().__init__()
        self._downstream = downstream
        self._teardown: Disposable | None = None
        self._disposed = False

    def on_next(self, value: T) -> None:
        if self._stopped or self._disposed:
            return
        self._downstream.on_next(value)

    def on_error(self, error: BaseException) -> None:
        if self._stopped or self._disposed:
            return
        self._stopped = True
        try:
            self._downstream.on_error(error)
        finally:
            self.dispose()

    def on_completed(self) -> None:
        if self._stopped or self._disposed:
            return
        self._stopped = True
        try:
            self._downstream.on_completed()
        finally:
            self.dispose()

    def set_teardown(self, teardown: Disposable) -> None:
        if self._disposed:
            teardown.dispose()
            return
        self._teardown = teardown

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown.dispose()


SubscribeFn = Callable[[Observer[Any]], "Disposable | None"]


class Observable(Generic[T]):
    """Lazy stream: ``subscribe_fn`` runs once per subscription."""

    def __init__(self, subscribe_fn: SubscribeFn) -> None:
        self._subscribe_fn = subscribe_fn

    def subscribe(
        self,
        on_next: OnNext | None = None,
        on_error: OnError | None = None,
        on_completed: OnCompleted | None = None,
    ) -> Disposable:
        return self.subscribe_observer(Observer(on_next, on_error, on_completed))

    def subscribe_observer(self, observer: Observer[T]) -> Disposable:
        sink: _Sink[T] = _Sink(observer)
        teardown = self._subscribe_fn(sink)
        sink.set_teardown(teardown if teardown is not None else Disposable())
        return Disposable(sink.dispose)

    def map(self, selector: Callable[[T], R]) -> Observable[R]:
        def _subscribe(observer: Observer[R]) -> Disposable:
            def _on_next(value: T) -> None:
                try:
                    mapped = selector(value)
                except Exception as exc:
                    observer.on_error(exc)
                    return
                observer.on_next(mapped)

            return self.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Observable(_subscribe)

    def skip(self, count: int) -> Observable[T]:
        if count < 0:
            raise ValueError("skip count must be >= 0.")

        def _subscribe(observer: Observer[T]) -> Disposable:
            remaining = count

            def _on_next(value: T) -> None:
                nonlocal remaining
                if remaining > 0:
                    remaining -= 1
                    return
                observer.on_next(value)

            return self.subscribe(_on_next, observer.on_error, observer.on_completed)

        return Observable(_subscribe)

    def catch_and_return(self, value: T) -> Observable[T]:
        """Replace an upstream error with one ``value`` and complete."""

        def _subscribe(observer: Observer[T]) -> Disposable:
            def _on_error(_: BaseException) -> None:
                observer.on_next(value)
                observer.on_completed()

            return self.subscribe(observer.on_next, _on_error, observer.on_completed)

        return Observable(_subscribe)

    def as_driver(self, *, on_error_just_return: T) -> Observable[T]:
        """Stream for view bindings: it never errors."""
        return self.catch_and_return(on_error_just_return)


class Subject(Observable[T], Observer[T]):
    """Multicast stream fed by calling its observer methods."""

    def __init__(self) -> None:
        Observable.__init__(self, self._subscribe_core)
        Observer.__init__(self)
        self._observers: list[Observer[T]] = []
        self._error: BaseException | None = None

    @property
    def has_observers(self) -> bool:
        return bool(self._observers)

    def on_next(self, value: T) -> None:
        if self._stopped:
            return
        for observer in tuple(self._observers):
            observer.on_next(value)

    def on_error(self, error: BaseException) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._error = error
        observers, self._observers = self._observers, []
        for observer in observers:
            observer.on_error(error)

    def on_completed(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        observers, self._observers = self._observers, []
        for observer in observers:
            observer.on_completed()

    def _subscribe_core(self, observer: Observer[T]) -> Disposable:
        if self._stopped:
            if self._error is not None:
                observer.on_error(self._error)
            else:
                observer.on_completed()
            return Disposable()
        self._observers.append(observer)
        return Disposable(lambda: self._remove(observer))

    def _remove(self, observer: Observer[T]) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass


class BehaviorRelay(Observable[T]):
    """Holds a current value, replays it on subscribe, and never terminates."""

    def __init__(self, value: T) -> None:
        super().__init__(self._subscribe_core)
        self._value = value
        self._subject: Subject[T] = Subject()

    @property
    def value(self) -> T:
        return self._value

    def accept(self, value: T) -> None:
        self._value = value
        self._subject.on_next(value)

    def _subscribe_core(self, observer: Observer[T]) -> Disposable:
        observer.on_next(self._value)
        return self._subject.subscribe_observer(observer)
