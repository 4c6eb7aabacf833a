"""Slack release announcements."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from release_train.exceptions import PublishError

if TYPE_CHECKING:
    from release_train.config.models import SlackConfig

logger = logging.getLogger(__name__)


def format_release_message(version: str, repository: str, url: str | None = None) -> str:
    """Build the announcement text in Slack mrkdwn."""
    text = f"Release `{version}` has been created on `{repository}`"
    if url:
        text += f"\n<{url}|View Changelog>"
    return text


class SlackNotifier:
    """Posts release announcements with ``chat.postMessage``."""

    def __init__(
        self,
        config: SlackConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        if config.token is None or not config.channel:
            raise ValueError("SlackNotifier needs a token and a channel")
        self.config = config
        self._http = httpx.Client(
            base_url=config.api_url,
            headers={"Authorization": f"Bearer {config.token.get_secret_value()}"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def post_release(self, version: str, repository: str, url: str | None = None) -> None:
        """Announce a release.

        Raises:
            PublishError: If Slack rejects the message
        """
        text = format_release_message(version, repository, url)
        try:
            response = self._http.post(
                "/chat.postMessage",
                json={"channel": self.config.channel, "text": text},
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PublishError(f"Slack request failed: {e}", step="notify slack") from e

        # Slack answers 200 even for failures and reports them in the body
        if not payload.get("ok", False):
            raise PublishError(
                f"Slack rejected the message: {payload.get('error', 'unknown error')}",
                step="notify slack",
            )
        logger.info("Announced %s in %s", version, self.config.channel)
