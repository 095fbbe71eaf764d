"""Stream, relay, dispose-bag and completable semantics."""

from __future__ import annotations

import pytest

from tweetie.reactive import BehaviorRelay, Completable, Disposable, DisposeBag, Observable, Subject
from tweetie.testing import RecordingObserver


def _record(stream: Observable, recorder: RecordingObserver) -> Disposable:
    return stream.subscribe(recorder.on_next, recorder.on_error, recorder.on_completed)


def test_disposable_runs_action_once() -> None:
    calls: list[str] = []
    disposable = Disposable(lambda: calls.append("x"))
    disposable.dispose()
    disposable.dispose()
    assert calls == ["x"]
    assert disposable.is_disposed


def test_dispose_bag_releases_all_and_disposes_late_additions() -> None:
    calls: list[int] = []
    bag = DisposeBag()
    Disposable(lambda: calls.append(1)).disposed_by(bag)
    Disposable(lambda: calls.append(2)).disposed_by(bag)
    assert len(bag) == 2

    bag.dispose()
    assert calls == [1, 2]

    Disposable(lambda: calls.append(3)).disposed_by(bag)
    assert calls == [1, 2, 3]
    assert len(bag) == 0


def test_observable_is_lazy_and_runs_per_subscription() -> None:
    starts: list[int] = []

    def _subscribe(observer):
        starts.append(1)
        observer.on_next("a")
        observer.on_completed()

    stream = Observable(_subscribe)
    assert starts == []

    first = RecordingObserver()
    second = RecordingObserver()
    _record(stream, first)
    _record(stream, second)

    assert starts == [1, 1]
    assert first.values == ["a"] and first.completed == 1
    assert second.values == ["a"] and second.completed == 1


def test_operators_map_and_skip() -> None:
    subject: Subject[int] = Subject()
    recorder = RecordingObserver()
    _record(subject.map(lambda v: v * 10).skip(1), recorder)

    for value in (1, 2, 3):
        subject.on_next(value)
    subject.on_completed()

    assert recorder.values == [20, 30]
    assert recorder.completed == 1


def test_skip_rejects_negative_count() -> None:
    with pytest.raises(ValueError, match="skip"):
        Subject().skip(-1)


def test_map_routes_selector_failure_into_stream() -> None:
    recorder = RecordingObserver()

    def _boom(_: int) -> int:
        raise ValueError("bad value")

    subject: Subject[int] = Subject()
    _record(subject.map(_boom), recorder)
    subject.on_next(1)
    subject.on_next(2)
    assert recorder.values == []
    assert len(recorder.errors) == 1
    assert isinstance(recorder.errors[0], ValueError)


def test_catch_and_return_substitutes_once_and_completes() -> None:
    subject: Subject[int] = Subject()
    recorder = RecordingObserver()
    _record(subject.as_driver(on_error_just_return=-1), recorder)

    subject.on_next(1)
    subject.on_error(RuntimeError("upstream"))
    subject.on_next(2)

    assert recorder.values == [1, -1]
    assert recorder.errors == []
    assert recorder.completed == 1


def test_unhandled_error_is_raised_to_emitter() -> None:
    with pytest.raises(RuntimeError, match="nobody"):
        Observable(lambda observer: observer.on_error(RuntimeError("nobody listens"))).subscribe()


def test_subject_stops_delivering_after_dispose() -> None:
    subject: Subject[str] = Subject()
    recorder = RecordingObserver()
    subscription = _record(subject, recorder)

    subject.on_next("a")
    subscription.dispose()
    subject.on_next("b")

    assert recorder.values == ["a"]
    assert not subject.has_observers


def test_subject_replays_terminal_event_to_late_subscribers() -> None:
    subject: Subject[str] = Subject()
    subject.on_completed()
    recorder = RecordingObserver()
    _record(subject, recorder)
    assert recorder.completed == 1


def test_behavior_relay_replays_current_value_and_never_coalesces() -> None:
    relay = BehaviorRelay(False)
    recorder = RecordingObserver()
    _record(relay, recorder)

    relay.accept(True)
    relay.accept(True)
    relay.accept(False)

    assert recorder.values == [False, True, True, False]
    assert relay.value is False


def test_completable_teardown_runs_after_completion() -> None:
    events: list[str] = []

    def _subscribe(completable):
        events.append("start")
        completable.on_completed()
        completable.on_completed()
        return Disposable(lambda: events.append("teardown"))

    Completable.create(_subscribe).subscribe(on_completed=lambda: events.append("completed"))
    assert events == ["start", "completed", "teardown"]


def test_completable_disposal_runs_teardown_without_completion() -> None:
    events: list[str] = []
    sink = []

    def _subscribe(completable):
        sink.append(completable)
        return Disposable(lambda: events.append("teardown"))

    subscription = Completable.create(_subscribe).subscribe(on_completed=lambda: events.append("completed"))
    subscription.dispose()
    sink[0].on_completed()

    assert events == ["teardown"]
