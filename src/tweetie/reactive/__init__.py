"""Reactive stream contracts."""

from .completable import Completable
from .disposables import Disposable, DisposeBag
from .observable import BehaviorRelay, Observable, Observer, Subject

__all__ = [
    "BehaviorRelay",
    "Completable",
    "Disposable",
    "DisposeBag",
    "Observable",
    "Observer",
    "Subject",
]
