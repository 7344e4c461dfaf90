"""
Chain reader.

Supplies the latest block hash used as WebAuthn challenge material, and the
chain registry lookup used by wallet sign-in messages.
"""

from typing import Optional, Protocol, runtime_checkable
import logging

from web3 import Web3

from ..chains import resolve_chain_id
from ..config import LitAuthSettings, get_settings
from ..exceptions import RemoteFailure

logger = logging.getLogger(__name__)


@runtime_checkable
class ChainReader(Protocol):
    """Chain access consumed by providers."""

    def get_latest_block_hash(self) -> bytes:
        ...

    def resolve_chain_id(self, name: str) -> int:
        ...


class Web3ChainReader:
    """JSON-RPC chain reader backed by web3."""

    def __init__(self, settings: Optional[LitAuthSettings] = None, web3: Optional[Web3] = None):
        settings = settings or get_settings()
        self.rpc_url = settings.rpc_url
        self.web3 = web3 or Web3(Web3.HTTPProvider(
            settings.rpc_url,
            request_kwargs={"timeout": settings.request_timeout}
        ))

    def get_latest_block_hash(self) -> bytes:
        """
        Fetch the latest block hash.

        Raises:
            RemoteFailure: If the RPC call fails
        """
        try:
            block = self.web3.eth.get_block("latest")
            block_hash = block["hash"]
        except Exception as e:
            logger.error(f"Failed to fetch latest block from {self.rpc_url}: {type(e).__name__}")
            raise RemoteFailure(f"Failed to fetch latest block: {type(e).__name__}") from e

        if not block_hash:
            raise RemoteFailure("Latest block has no hash")
        return bytes(block_hash)

    def resolve_chain_id(self, name: str) -> int:
        return resolve_chain_id(name)
