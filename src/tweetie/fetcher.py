"""Timeline fetch session bound to an account stream and a list."""

from __future__ import annotations

from tweetie.api import ApiFactory, TwitterAPI
from tweetie.errors import FetchError
from tweetie.logging import get_logger
from tweetie.models import AccountStatus, ListIdentifier, TimelineCursor, Tweet
from tweetie.reactive import BehaviorRelay, DisposeBag, Observable, Subject

logger = get_logger(__name__)


class TimelineFetcher:
    """Fetch new tweets of one list while an account is authorized.

    ``paused`` suspends fetching without tearing down subscriptions. Each
    successful ``refresh()`` emits its decoded batch on ``timeline`` and moves
    the cursor past it.
    """

    def __init__(
        self,
        account: Observable[AccountStatus],
        list_id: ListIdentifier,
        api_type: ApiFactory = TwitterAPI,
    ) -> None:
        self._list = list_id
        self._api = api_type()
        self._bag = DisposeBag()
        self._token: str | None = None
        self._cursor = TimelineCursor()
        self._timeline: Subject[list[Tweet]] = Subject()
        self.paused: BehaviorRelay[bool] = BehaviorRelay(False)

        account.subscribe(
            on_next=self._on_account,
            on_error=self._on_account_error,
        ).disposed_by(self._bag)
        self.paused.skip(1).subscribe(
            on_next=lambda paused: logger.debug("Fetcher for %s paused=%s", self._list, paused)
        ).disposed_by(self._bag)

    @property
    def list(self) -> ListIdentifier:
        return self._list

    @property
    def timeline(self) -> Observable[list[Tweet]]:
        return self._timeline

    @property
    def cursor(self) -> TimelineCursor:
        return self._cursor

    @property
    def is_authorized(self) -> bool:
        return self._token is not None

    def refresh(self) -> list[Tweet] | None:
        """Run one fetch cycle; return the emitted batch, or None when skipped."""
        if self._bag.is_disposed:
            return None
        if self.paused.value:
            logger.debug("Skipping fetch for %s: paused", self._list)
            return None
        if self._token is None:
            logger.debug("Skipping fetch for %s: account unavailable", self._list)
            return None

        try:
            payloads = self._api.timeline(self._token, self._list, self._cursor)
        except FetchError as exc:
            logger.warning("Timeline fetch failed for %s: %s", self._list, exc)
            return None

        tweets = Tweet.unbox_many(payloads)
        self._cursor = self._cursor.advance(tweets)
        logger.debug("Fetched %d tweets for %s; cursor=%s", len(tweets), self._list, self._cursor)
        self._timeline.on_next(tweets)
        return tweets

    def dispose(self) -> None:
        self._bag.dispose()
        self._timeline.on_completed()
        close = getattr(self._api, "close", None)
        if callable(close):
            close()

    def _on_account(self, status: AccountStatus) -> None:
        self._token = status.token if status.is_authorized else None

    def _on_account_error(self, error: BaseException) -> None:
        logger.warning("Account stream failed for %s: %s", self._list, error)
        self._token = None
