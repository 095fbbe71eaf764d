"""Terminal notice host used by the command line."""

from __future__ import annotations

from collections.abc import Callable

import typer

from tweetie.notice import CLOSE_ACTION_TITLE, NoticePresenter, PresentedNotice

EchoFn = Callable[[str], None]
InputFn = Callable[[str], str]


class ConsoleNoticeHost(NoticePresenter):
    """Print notices and wait for Enter to trigger their "Close" action.

    Notices stack: a new one is shown on top of those already visible, and
    each leaves the stack exactly once, by closing or by dismissal.
    """

    def __init__(self, *, echo: EchoFn = typer.echo, input_fn: InputFn = input) -> None:
        self._echo = echo
        self._input = input_fn
        self._shown: list[PresentedNotice] = []

    @property
    def current(self) -> PresentedNotice | None:
        return self._shown[-1] if self._shown else None

    def present(self, element: PresentedNotice) -> None:
        self._shown.append(element)
        self._echo(f"[!] {element.notice.title}")
        if element.notice.description:
            self._echo(f"    {element.notice.description}")

    def dismiss(self, element: PresentedNotice) -> None:
        if not self._hide(element):
            return
        self._echo(f"[x] {element.notice.title} (dismissed)")

    def wait_for_close(self) -> bool:
        """Block until the user presses Enter; return False when nothing is shown."""
        element = self.current
        if element is None:
            return False
        action = element.action(CLOSE_ACTION_TITLE)
        try:
            self._input(f"Press Enter to {action.title.lower()} ")
        except EOFError:
            # Closed stdin counts as acknowledgment.
            pass
        self._hide(element)
        action.invoke()
        return True

    def _hide(self, element: PresentedNotice) -> bool:
        for index, shown in enumerate(self._shown):
            if shown is element:
                del self._shown[index]
                return True
        return False
