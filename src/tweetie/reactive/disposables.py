"""Cancellation handles and scoped release of subscriptions."""

from __future__ import annotations

from collections.abc import Callable


class Disposable:
    """Run a release action at most once."""

    def __init__(self, action: Callable[[], None] | None = None) -> None:
        self._action = action
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        action, self._action = self._action, None
        if action is not None:
            action()

    def disposed_by(self, bag: DisposeBag) -> Disposable:
        bag.add(self)
        return self


class DisposeBag:
    """Set of active subscriptions released together by the owner's teardown."""

    def __init__(self) -> None:
        self._disposables: list[Disposable] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def __len__(self) -> int:
        return len(self._disposables)

    def add(self, disposable: Disposable) -> None:
        if self._disposed:
            disposable.dispose()
            return
        self._disposables.append(disposable)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        disposables, self._disposables = self._disposables, []
        for disposable in disposables:
            disposable.dispose()
