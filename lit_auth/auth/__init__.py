"""Authentication flows and identifier derivation."""

from .identity import IdentityHasher, get_auth_method_id, hash_identifier
from .siwe import SiweMessage

__all__ = ["IdentityHasher", "get_auth_method_id", "hash_identifier", "SiweMessage"]
