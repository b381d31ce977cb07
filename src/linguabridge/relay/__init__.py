"""Cross-channel relay core.

The relay package is platform-agnostic.  It only relies on the ports in
:mod:`linguabridge.relay.ports`:

- :mod:`~linguabridge.relay.tags` -- protects inline tags around a
  translation call.
- :mod:`~linguabridge.relay.models` -- configuration, link records and
  platform-neutral message types.
- :mod:`~linguabridge.relay.preview` -- reply previews and reply mentions.
- :mod:`~linguabridge.relay.orchestrator` -- fan-out of new messages and
  edits to every linked channel.

The orchestrator is imported from its module directly, since it depends on
:mod:`linguabridge.cache`, which in turn depends on the models here.
"""

from linguabridge.relay.errors import (
    ConfigurationMissing,
    ProviderFailure,
    ReferenceNotFound,
    RelayError,
)
from linguabridge.relay.models import (
    Author,
    ChannelTopologyEdge,
    ChannelTranslationConfig,
    FetchedMessage,
    InboundMessage,
    MessageCopy,
    MessageLinkRecord,
    OutgoingPayload,
    ReplyPreview,
)
from linguabridge.relay.tags import TagTranscoder

__all__ = [
    "Author",
    "ChannelTopologyEdge",
    "ChannelTranslationConfig",
    "ConfigurationMissing",
    "FetchedMessage",
    "InboundMessage",
    "MessageCopy",
    "MessageLinkRecord",
    "OutgoingPayload",
    "ProviderFailure",
    "ReferenceNotFound",
    "RelayError",
    "ReplyPreview",
    "TagTranscoder",
]
