"""Data model contracts for cross-module use."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import re
from typing import Any

from tweetie.errors import DecodeError
from tweetie.logging import get_logger

logger = get_logger(__name__)

TWITTER_DATE_FORMAT = "%a %b %d %H:%M:%S %z %Y"

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{1,32}$")
_SLUG_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class ListIdentifier:
    """Names a remote list feed as ``username/slug``."""

    username: str
    slug: str

    def __post_init__(self) -> None:
        if not _USERNAME_RE.match(self.username):
            raise ValueError(f"Invalid list owner '{self.username}': expected 1-32 of [A-Za-z0-9_].")
        if not _SLUG_RE.match(self.slug):
            raise ValueError(f"Invalid list slug '{self.slug}': expected 1-64 of [A-Za-z0-9_-].")

    @classmethod
    def parse(cls, raw: str) -> ListIdentifier:
        value = raw.strip().lstrip("@")
        username, sep, slug = value.partition("/")
        if not sep or not username or not slug or "/" in slug:
            raise ValueError(f"Invalid list identifier '{raw}': expected 'username/slug'.")
        return cls(username=username, slug=slug)

    def __str__(self) -> str:
        return f"{self.username}/{self.slug}"


class AccountState(str, Enum):
    AUTHORIZED = "authorized"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class AccountStatus:
    state: AccountState
    token: str | None = None

    @classmethod
    def authorized(cls, token: str) -> AccountStatus:
        if not token or not token.strip():
            raise ValueError("An authorized account status requires a non-empty access token.")
        return cls(state=AccountState.AUTHORIZED, token=token)

    @classmethod
    def unavailable(cls) -> AccountStatus:
        return cls(state=AccountState.UNAVAILABLE)

    @property
    def is_authorized(self) -> bool:
        return self.state is AccountState.AUTHORIZED


@dataclass(frozen=True)
class Tweet:
    id: int
    text: str
    name: str
    created: datetime
    image_url: str | None = None

    @classmethod
    def unbox(cls, payload: Mapping[str, Any]) -> Tweet:
        """Decode one status object from the list timeline API."""
        raw_id = payload.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            raw_id = payload.get("id_str")
            if not isinstance(raw_id, str) or not raw_id.isdigit():
                raise DecodeError(f"Tweet payload has no usable id: {payload.get('id')!r}.")
            raw_id = int(raw_id)

        text = payload.get("full_text", payload.get("text"))
        if not isinstance(text, str):
            raise DecodeError(f"Tweet {raw_id} has no text.")

        user = payload.get("user")
        if not isinstance(user, Mapping):
            raise DecodeError(f"Tweet {raw_id} has no user object.")
        name = user.get("name")
        if not isinstance(name, str):
            raise DecodeError(f"Tweet {raw_id} has no author name.")

        image_url = user.get("profile_image_url_https") or user.get("profile_image_url")
        return cls(
            id=raw_id,
            text=text,
            name=name,
            created=_parse_created(payload.get("created_at"), raw_id),
            image_url=str(image_url) if image_url else None,
        )

    @classmethod
    def unbox_many(cls, payloads: Iterable[Mapping[str, Any]]) -> list[Tweet]:
        tweets: list[Tweet] = []
        for payload in payloads:
            try:
                tweets.append(cls.unbox(payload))
            except DecodeError as exc:
                logger.debug("Dropping undecodable tweet payload: %s", exc)
        return tweets


@dataclass(frozen=True)
class TimelineCursor:
    """Position in a timeline: only tweets with ids above ``since_id`` are new."""

    since_id: int = 0

    @property
    def is_initial(self) -> bool:
        return self.since_id == 0

    def advance(self, tweets: Iterable[Tweet]) -> TimelineCursor:
        newest = max((tweet.id for tweet in tweets), default=self.since_id)
        return TimelineCursor(since_id=max(self.since_id, newest))


def _parse_created(raw: object, tweet_id: int) -> datetime:
    if not isinstance(raw, str) or not raw.strip():
        raise DecodeError(f"Tweet {tweet_id} has no created_at timestamp.")
    value = raw.strip()
    try:
        parsed = datetime.strptime(value, TWITTER_DATE_FORMAT)
    except ValueError:
        if value.endswith("Z"):
            value = f"{value[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise DecodeError(f"Tweet {tweet_id} has invalid created_at {raw!r}.") from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
