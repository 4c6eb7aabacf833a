"""Release notifications."""

from __future__ import annotations

from release_train.notify.slack import SlackNotifier, format_release_message

__all__ = ["SlackNotifier", "format_release_message"]
