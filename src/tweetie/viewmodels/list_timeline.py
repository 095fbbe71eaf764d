"""View-model mirroring the local tweet store against a remote list feed."""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType

from tweetie.api import ApiFactory, TwitterAPI
from tweetie.config import default_store_path
from tweetie.errors import BindingError, StoreError
from tweetie.fetcher import TimelineFetcher
from tweetie.logging import get_logger
from tweetie.models import AccountState, AccountStatus, ListIdentifier, Tweet
from tweetie.reactive import Disposable, DisposeBag, Observable
from tweetie.store import CollectionChange, TweetStore, open_store

logger = get_logger(__name__)

StoreFactory = Callable[[], TweetStore]
FetcherFactory = Callable[[Observable[AccountStatus], ListIdentifier, ApiFactory], TimelineFetcher]


def default_store() -> TweetStore:
    return open_store(default_store_path())


class ListTimelineViewModel:
    """Bind a list feed, the local store and the account status for a view.

    Inputs are ``account``, ``list`` and the writable ``paused`` flag. Outputs
    are ``tweets`` (collection snapshots with their change sets) and
    ``logged_in``. Both outputs are bound once, during construction.
    """

    def __init__(
        self,
        account: Observable[AccountStatus],
        list_id: ListIdentifier,
        api_type: ApiFactory = TwitterAPI,
        *,
        store: TweetStore | None = None,
        store_factory: StoreFactory = default_store,
        fetcher_factory: FetcherFactory = TimelineFetcher,
    ) -> None:
        self._bag = DisposeBag()
        self._account = account
        self._list = list_id
        self._paused = False
        self._tweets: Observable[CollectionChange] | None = None
        self._logged_in: Observable[bool] | None = None

        self._owns_store = store is None
        if store is None:
            try:
                store = store_factory()
            except StoreError as exc:
                raise BindingError(
                    f"Could not open the local tweet store for list '{list_id}': {exc}"
                ) from exc
        self._store = store

        # fetch and store tweets
        try:
            self._fetcher = fetcher_factory(account, list_id, api_type)
        except Exception:
            if self._owns_store:
                self._store.close()
            raise
        self._fetcher.timeline.subscribe(on_next=self._store_batch).disposed_by(self._bag)

        self._bind_output()

    # Input

    @property
    def account(self) -> Observable[AccountStatus]:
        return self._account

    @property
    def list(self) -> ListIdentifier:
        return self._list

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = bool(value)
        self._fetcher.paused.accept(self._paused)

    # Output

    @property
    def tweets(self) -> Observable[CollectionChange]:
        if self._tweets is None:
            raise BindingError("tweets output is not bound.")
        return self._tweets

    @property
    def logged_in(self) -> Observable[bool]:
        if self._logged_in is None:
            raise BindingError("logged_in output is not bound.")
        return self._logged_in

    @property
    def is_disposed(self) -> bool:
        return self._bag.is_disposed

    def bind_tweets(self, on_next: Callable[[CollectionChange], None]) -> Disposable:
        """Subscribe to ``tweets`` for the lifetime of this view-model."""
        return self.tweets.subscribe(on_next=on_next).disposed_by(self._bag)

    def bind_logged_in(self, on_next: Callable[[bool], None]) -> Disposable:
        """Subscribe to ``logged_in`` for the lifetime of this view-model."""
        return self.logged_in.subscribe(on_next=on_next).disposed_by(self._bag)

    def refresh(self) -> list[Tweet] | None:
        return self._fetcher.refresh()

    def dispose(self) -> None:
        if self._bag.is_disposed:
            return
        self._bag.dispose()
        self._fetcher.dispose()
        if self._owns_store:
            self._store.close()
        logger.debug("Disposed timeline view-model for %s", self._list)

    def __enter__(self) -> ListTimelineViewModel:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()

    def _store_batch(self, tweets: list[Tweet]) -> None:
        self._store.add(tweets, update=True)

    def _bind_output(self) -> None:
        if self._tweets is not None or self._logged_in is not None:
            raise BindingError("View-model outputs are already bound.")
        self._tweets = self._store.changeset()
        self._logged_in = self._account.map(_is_logged_in).as_driver(on_error_just_return=False)


def _is_logged_in(status: AccountStatus) -> bool:
    if status.state is AccountState.AUTHORIZED:
        return True
    if status.state is AccountState.UNAVAILABLE:
        return False
    raise BindingError(f"Unknown account state {status.state!r}.")
