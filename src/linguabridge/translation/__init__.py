"""Translation provider clients."""

from linguabridge.translation.deepl import DeepLClient, DeepLError

__all__ = ["DeepLClient", "DeepLError"]
