"""Test-only utilities for deterministic stream and host assertions."""

from .fakes import FakeTwitterAPI, RecordingNoticeHost, RecordingObserver, SleepRecorder, status_payload

__all__ = [
    "FakeTwitterAPI",
    "RecordingNoticeHost",
    "RecordingObserver",
    "SleepRecorder",
    "status_payload",
]
