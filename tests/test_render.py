"""Rendering of stored tweets and change summaries."""

from __future__ import annotations

from datetime import datetime, timezone
import json

from tweetie.models import Tweet
from tweetie.render import render_change, render_json, render_pretty
from tweetie.store import ChangeSet, TweetCollection

TWEET = Tweet(
    id=7,
    text="hello world",
    name="Alice",
    created=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    image_url="https://example.com/a.png",
)


def test_render_pretty_lists_tweets() -> None:
    assert render_pretty(TweetCollection()) == "(no tweets)"
    assert render_pretty(TweetCollection((TWEET,))) == (
        "2026-01-02T03:04:05+00:00 7 Alice\n  hello world"
    )


def test_render_json_is_stable() -> None:
    payload = json.loads(render_json(TweetCollection((TWEET,))))
    assert payload == [
        {
            "created": "2026-01-02T03:04:05+00:00",
            "id": 7,
            "image_url": "https://example.com/a.png",
            "name": "Alice",
            "text": "hello world",
        }
    ]


def test_render_change_summarizes_delta() -> None:
    collection = TweetCollection((TWEET,))
    assert render_change(collection, None) == "1 tweet(s) stored"
    assert render_change(collection, ChangeSet(deleted=(0, 1), inserted=(0,))) == (
        "1 tweet(s) stored: +1 ~0 -2"
    )
