"""PostgreSQL storage backends for LinguaBridge."""

from .channels import ChannelConfigStore
from .links import MessageLinkStore
from .postgres import PostgresDatabase

__all__ = [
    "ChannelConfigStore",
    "MessageLinkStore",
    "PostgresDatabase",
]
