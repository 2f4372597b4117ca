"""Course teaching-assistant gateway for Discord."""

from __future__ import annotations

__all__: list[str] = []
