"""Single-completion operations."""

from __future__ import annotations

from collections.abc import Callable

from tweetie.reactive.disposables import Disposable
from tweetie.reactive.observable import Observable, Observer, OnCompleted, OnError

CompletableSubscribeFn = Callable[[Observer[None]], "Disposable | None"]


class Completable:
    """Operation that produces no values, only one completion or one failure.

    The work starts when something subscribes. The teardown returned by the
    subscribe function runs exactly once: after the terminal event, or when
    the consumer disposes the subscription first.
    """

    def __init__(self, subscribe_fn: CompletableSubscribeFn) -> None:
        self._observable: Observable[None] = Observable(subscribe_fn)

    @classmethod
    def create(cls, subscribe_fn: CompletableSubscribeFn) -> Completable:
        return cls(subscribe_fn)

    def subscribe(
        self,
        on_completed: OnCompleted | None = None,
        on_error: OnError | None = None,
    ) -> Disposable:
        return self._observable.subscribe(on_error=on_error, on_completed=on_completed)
