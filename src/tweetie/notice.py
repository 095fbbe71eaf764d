"""Dismissable notices exposed as single-completion operations."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
import weakref

from tweetie.errors import NoticeError
from tweetie.logging import get_logger
from tweetie.reactive import Completable, Disposable, Observer

logger = get_logger(__name__)

CLOSE_ACTION_TITLE = "Close"


@dataclass(frozen=True)
class Notice:
    title: str
    description: str | None = None


@dataclass(frozen=True)
class NoticeAction:
    title: str
    handler: Callable[[], None]

    def invoke(self) -> None:
        self.handler()


@dataclass(frozen=True)
class PresentedNotice:
    """Element handed to a host: the notice plus the actions it offers."""

    notice: Notice
    actions: tuple[NoticeAction, ...]

    def action(self, title: str) -> NoticeAction:
        for action in self.actions:
            if action.title == title:
                return action
        raise NoticeError(f"Notice '{self.notice.title}' has no action titled '{title}'.")


class NoticeHost(Protocol):
    def present(self, element: PresentedNotice) -> None:
        """Show a modal element.

        When the user invokes one of its actions the host hides the element
        itself, then runs the action handler.
        """

    def dismiss(self, element: PresentedNotice) -> None:
        """Hide ``element`` programmatically; elements no longer shown are ignored."""


def present_alert(host: NoticeHost, title: str, description: str | None = None) -> Completable:
    """Return a Completable that shows a notice with a single "Close" action.

    Nothing is presented until the Completable is subscribed. It completes once
    the user closes the notice; disposing the subscription earlier dismisses
    the notice instead. Only a weak reference to ``host`` is kept, so a host
    that has gone away is skipped silently.
    """
    if not isinstance(title, str) or not title.strip():
        raise NoticeError("Notice title must be a non-empty string.")
    notice = Notice(title=title, description=description)
    try:
        host_ref = weakref.ref(host)
    except TypeError as exc:
        raise NoticeError(
            f"Notice host {type(host).__name__} must support weak references."
        ) from exc

    def _subscribe(completable: Observer[None]) -> Disposable:
        finished = False

        def _close() -> None:
            nonlocal finished
            if finished:
                return
            finished = True
            completable.on_completed()

        element = PresentedNotice(
            notice=notice,
            actions=(NoticeAction(title=CLOSE_ACTION_TITLE, handler=_close),),
        )
        presenter = host_ref()
        if presenter is None:
            logger.debug("Notice host released before presenting %r", notice.title)
        else:
            presenter.present(element)

        def _cleanup() -> None:
            nonlocal finished
            if finished:
                return
            finished = True
            target = host_ref()
            if target is None:
                logger.debug("Notice host released before dismissing %r", notice.title)
                return
            target.dismiss(element)

        return Disposable(_cleanup)

    return Completable.create(_subscribe)


class NoticePresenter:
    """Mixin giving a host an ``alert()`` helper."""

    def alert(self, title: str, description: str | None = None) -> Completable:
        return present_alert(self, title, description)  # type: ignore[arg-type]
