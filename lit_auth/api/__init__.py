"""HTTP and chain clients."""

from .base import BaseAPIClient
from .chain import ChainReader, Web3ChainReader
from .discord import DiscordClient
from .otp import OtpClient
from .relay import Relay, RelayClient

__all__ = [
    "BaseAPIClient",
    "ChainReader",
    "Web3ChainReader",
    "DiscordClient",
    "OtpClient",
    "Relay",
    "RelayClient",
]
