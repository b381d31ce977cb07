"""Failure categories for the relay subsystem.

The relay fails quietly: none of these ever reach a chat channel.  They
exist so that adapters can tell the orchestrator *what kind* of thing went
wrong, which decides the log level and whether sibling branches care.

* :class:`ConfigurationMissing` -- a channel is not set up for translation
  or linking.  Silent no-op.
* :class:`ReferenceNotFound` -- a channel, message, reply target or link
  record does not exist (any more).  Silent no-op.
* :class:`ProviderFailure` -- the translation provider or the messaging
  platform rejected a call.  Logged; the branch or copy is abandoned.

A partial relay (some branches succeeded, some did not) is logged as a
warning by the orchestrator and is not an exception.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for all relay failures."""


class ConfigurationMissing(RelayError):
    """A source or target channel has no translation configuration."""


class ReferenceNotFound(RelayError):
    """A referenced channel, message or link record is absent."""


class ProviderFailure(RelayError):
    """A translation or messaging call failed.

    Attributes:
        status_code: HTTP status reported by the provider, when known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(
            f"{message} (status={status_code})" if status_code is not None else message
        )
