"""Storage interfaces for the local tweet collection."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from tweetie.models import Tweet
from tweetie.reactive import Observable
from tweetie.store.changeset import ChangeSet, TweetCollection

CollectionChange = tuple[TweetCollection, "ChangeSet | None"]


class TweetStore(Protocol):
    def add(self, tweets: Iterable[Tweet], *, update: bool = True) -> int:
        """Upsert tweets by id and return the number of rows written."""

    def objects(self) -> TweetCollection:
        """Return the current collection, newest first."""

    def changeset(self) -> Observable[CollectionChange]:
        """Stream the collection after every write, with the delta since the last emission."""

    def close(self) -> None:
        """Release the store."""
