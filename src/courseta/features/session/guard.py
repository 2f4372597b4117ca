from __future__ import annotations


class ChannelGuard:
    """Only lets interactions from the configured assistant channel through."""

    def __init__(self, channel_id: str | int) -> None:
        normalised = str(channel_id).strip()
        if not normalised:
            raise ValueError("channel id must not be blank")
        self._channel_id = normalised

    @property
    def channel_id(self) -> str:
        return self._channel_id

    def permits(self, channel_id: str | int | None) -> bool:
        if channel_id is None:
            return False
        return str(channel_id).strip() == self._channel_id
