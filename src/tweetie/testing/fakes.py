"""In-memory collaborators reused by view-model, fetcher and notice tests."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from tweetie.models import TWITTER_DATE_FORMAT, ListIdentifier, TimelineCursor
from tweetie.notice import CLOSE_ACTION_TITLE, NoticePresenter, PresentedNotice

T = TypeVar("T")


@dataclass
class RecordingObserver(Generic[T]):
    """Collects every event of a stream; pass its methods to ``subscribe``."""

    values: list[T] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)
    completed: int = 0

    def on_next(self, value: T) -> None:
        self.values.append(value)

    def on_error(self, error: BaseException) -> None:
        self.errors.append(error)

    def on_completed(self) -> None:
        self.completed += 1


class RecordingNoticeHost(NoticePresenter):
    """Notice host that records presentations and dismissals."""

    def __init__(self) -> None:
        self.presented: list[PresentedNotice] = []
        self.dismissed: list[PresentedNotice] = []
        self.closed_by_user = 0
        self.current: PresentedNotice | None = None

    @property
    def dismiss_calls(self) -> int:
        return len(self.dismissed)

    @property
    def dismissals(self) -> int:
        return self.dismiss_calls + self.closed_by_user

    def present(self, element: PresentedNotice) -> None:
        self.presented.append(element)
        self.current = element

    def dismiss(self, element: PresentedNotice) -> None:
        self.dismissed.append(element)
        if self.current is element:
            self.current = None

    def close(self) -> None:
        """Simulate the user pressing "Close": hide the element, then run the handler."""
        element = self.current
        if element is None:
            raise AssertionError("No notice is currently presented.")
        self.current = None
        self.closed_by_user += 1
        element.action(CLOSE_ACTION_TITLE).invoke()


@dataclass
class FakeTwitterAPI:
    """Queue of canned list-feed responses; an exception entry is raised instead."""

    responses: deque[list[dict[str, Any]] | Exception] = field(default_factory=deque)
    calls: list[tuple[str, ListIdentifier, TimelineCursor]] = field(default_factory=list)
    closed: bool = False

    def queue(self, *responses: list[dict[str, Any]] | Exception) -> FakeTwitterAPI:
        self.responses.extend(responses)
        return self

    def timeline(
        self,
        token: str,
        list_id: ListIdentifier,
        cursor: TimelineCursor,
    ) -> list[dict[str, Any]]:
        self.calls.append((token, list_id, cursor))
        if not self.responses:
            return []
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


@dataclass
class SleepRecorder:
    """Sleep function that records requested sleeps for deterministic assertions."""

    calls: list[float] = field(default_factory=list)

    def __call__(self, seconds: float) -> None:
        self.calls.append(float(seconds))


def status_payload(
    tweet_id: int,
    text: str = "hello",
    *,
    name: str = "Alice",
    created: datetime | None = None,
    image_url: str | None = "https://example.com/a.png",
) -> dict[str, Any]:
    """Build a list-feed status object in the remote wire shape."""
    moment = created or datetime(2026, 1, 1, tzinfo=timezone.utc)
    return {
        "id": tweet_id,
        "id_str": str(tweet_id),
        "text": text,
        "created_at": moment.astimezone(timezone.utc).strftime(TWITTER_DATE_FORMAT),
        "user": {"name": name, "profile_image_url_https": image_url},
    }

