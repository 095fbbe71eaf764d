"""tweetie package."""

from .models import AccountState, AccountStatus, ListIdentifier, TimelineCursor, Tweet
from .notice import Notice, NoticeHost, NoticePresenter, present_alert
from .viewmodels import ListTimelineViewModel

__all__ = [
    "AccountState",
    "AccountStatus",
    "ListIdentifier",
    "ListTimelineViewModel",
    "Notice",
    "NoticeHost",
    "NoticePresenter",
    "TimelineCursor",
    "Tweet",
    "present_alert",
]

__version__ = "0.1.0"
