"""release-train: version and changelog decisions for channel-based releases."""

from __future__ import annotations

__version__ = "0.1.0"
