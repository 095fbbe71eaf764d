"""Human-friendly and JSON rendering of stored tweets."""

from __future__ import annotations

import json

from tweetie.models import Tweet
from tweetie.store.changeset import ChangeSet, TweetCollection


def render_pretty(tweets: TweetCollection) -> str:
    if not tweets:
        return "(no tweets)"

    lines: list[str] = []
    for tweet in tweets:
        lines.append(f"{tweet.created.isoformat()} {tweet.id} {tweet.name}")
        if tweet.text:
            lines.append(f"  {tweet.text}")
    return "\n".join(lines)


def render_json(tweets: TweetCollection) -> str:
    return json.dumps([tweet_to_dict(tweet) for tweet in tweets], indent=2, sort_keys=True)


def render_change(tweets: TweetCollection, change: ChangeSet | None) -> str:
    if change is None:
        return f"{len(tweets)} tweet(s) stored"
    return (
        f"{len(tweets)} tweet(s) stored: "
        f"+{len(change.inserted)} ~{len(change.updated)} -{len(change.deleted)}"
    )


def tweet_to_dict(tweet: Tweet) -> dict[str, object]:
    return {
        "id": tweet.id,
        "text": tweet.text,
        "name": tweet.name,
        "created": tweet.created.isoformat(),
        "image_url": tweet.image_url,
    }
