"""Account status source."""

from __future__ import annotations

from collections.abc import Mapping
import os

from tweetie.logging import get_logger
from tweetie.models import AccountStatus
from tweetie.reactive import BehaviorRelay, Observable

logger = get_logger(__name__)

DEFAULT_TOKEN_ENV = "TWEETIE_ACCESS_TOKEN"


class TwitterAccount:
    """Owns the current account status and publishes every transition."""

    def __init__(self, status: AccountStatus | None = None) -> None:
        self._status: BehaviorRelay[AccountStatus] = BehaviorRelay(
            status or AccountStatus.unavailable()
        )

    @classmethod
    def from_environment(
        cls,
        token_env: str = DEFAULT_TOKEN_ENV,
        environ: Mapping[str, str] | None = None,
    ) -> TwitterAccount:
        env = os.environ if environ is None else environ
        token = (env.get(token_env) or "").strip()
        if not token:
            logger.info("No access token in $%s; account unavailable", token_env)
            return cls()
        return cls(AccountStatus.authorized(token))

    @property
    def status(self) -> Observable[AccountStatus]:
        return self._status

    @property
    def current(self) -> AccountStatus:
        return self._status.value

    def authorize(self, token: str) -> None:
        self._status.accept(AccountStatus.authorized(token))

    def sign_out(self) -> None:
        self._status.accept(AccountStatus.unavailable())
