"""Error taxonomy for stable module boundaries."""


class TweetieError(Exception):
    """Base exception for tweetie."""


class ConfigError(TweetieError):
    """Raised when configuration is invalid or missing."""


class StoreError(TweetieError):
    """Raised for local tweet store failures."""


class FetchError(TweetieError):
    """Raised when the remote timeline cannot be fetched."""


class DecodeError(TweetieError):
    """Raised when a remote record cannot be decoded into a tweet."""


class NoticeError(TweetieError):
    """Raised when a notice cannot be built or presented."""


class BindingError(TweetieError):
    """Raised when a view-model cannot bind its outputs."""


class SchedulerError(TweetieError):
    """Raised for fetch loop budget and argument failures."""
