"""Failure taxonomy for the assistant.

Router-level steps report failures as :class:`Failure` values.  Exceptions
only cross the adapter seams (backend and delivery) and the fatal startup
path, where :class:`ConfigurationError` stops the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "BackendError",
    "ChannelDenied",
    "ConfigurationError",
    "CourseTAError",
    "DeliveryError",
    "Failure",
    "FailureKind",
    "ValidationError",
]


class FailureKind(str, Enum):
    CHANNEL_DENIED = "channel_denied"
    VALIDATION = "validation"
    BACKEND = "backend"
    DELIVERY = "delivery"
    # Unexpected fault inside a step; logged with its traceback.
    INTERNAL = "internal"


class CourseTAError(Exception):
    """Base class for every error raised by the assistant."""

    kind: FailureKind | None = None


class ConfigurationError(CourseTAError):
    """A required setting or catalog entry is missing; fatal at startup."""


class ChannelDenied(CourseTAError):
    kind = FailureKind.CHANNEL_DENIED


class ValidationError(CourseTAError):
    kind = FailureKind.VALIDATION


class BackendError(CourseTAError):
    kind = FailureKind.BACKEND


class DeliveryError(CourseTAError):
    kind = FailureKind.DELIVERY


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    cause: BaseException | None = None

    @classmethod
    def from_error(cls, error: CourseTAError, message: str | None = None) -> Failure:
        if error.kind is None:
            raise TypeError(f"{type(error).__name__} has no recoverable failure kind")
        return cls(kind=error.kind, message=message or str(error), cause=error)
