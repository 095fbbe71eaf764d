"""Ordered tweet snapshots and the change sets between them."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import overload

from tweetie.models import Tweet


@dataclass(frozen=True)
class TweetCollection(Sequence[Tweet]):
    """Immutable snapshot of stored tweets, newest first."""

    items: tuple[Tweet, ...] = ()

    @overload
    def __getitem__(self, index: int) -> Tweet: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Tweet, ...]: ...

    def __getitem__(self, index: int | slice) -> Tweet | tuple[Tweet, ...]:
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Tweet]:
        return iter(self.items)

    def ids(self) -> tuple[int, ...]:
        return tuple(tweet.id for tweet in self.items)


@dataclass(frozen=True)
class ChangeSet:
    """Index-based delta between two snapshots.

    ``deleted`` indexes the previous snapshot; ``inserted`` and ``updated``
    index the current one. A row whose position changes is reported as a
    deletion plus an insertion.
    """

    deleted: tuple[int, ...] = ()
    inserted: tuple[int, ...] = ()
    updated: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.deleted or self.inserted or self.updated)


def diff_collections(previous: TweetCollection, current: TweetCollection) -> ChangeSet:
    previous_index = {tweet.id: index for index, tweet in enumerate(previous)}
    current_ids = {tweet.id for tweet in current}

    # Surviving rows keep their relative order unless their sort key changed.
    moved = {
        tweet.id
        for tweet in current
        if tweet.id in previous_index and previous[previous_index[tweet.id]].created != tweet.created
    }

    deleted = tuple(
        index
        for index, tweet in enumerate(previous)
        if tweet.id not in current_ids or tweet.id in moved
    )
    inserted = tuple(
        index
        for index, tweet in enumerate(current)
        if tweet.id not in previous_index or tweet.id in moved
    )
    updated = tuple(
        index
        for index, tweet in enumerate(current)
        if tweet.id in previous_index
        and tweet.id not in moved
        and previous[previous_index[tweet.id]] != tweet
    )
    return ChangeSet(deleted=deleted, inserted=inserted, updated=updated)
