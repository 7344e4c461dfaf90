"""
Example 1: Wallet Sign-In

Signs a Sign-In with Ethereum message with a local key, then derives the
auth method id and verifies the signature.

Uses a throwaway key. Never paste a funded key into an example.
"""

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from lit_auth import EthWalletProvider, SiweMessage
from lit_auth.logging_config import setup_logging
from lit_auth.providers.eth_wallet import auth_sig_from_access_token
from lit_auth.metrics import Metrics


def main():
    """Wallet sign-in example."""
    setup_logging(level="INFO")

    account = Account.create()
    print(f"Using throwaway account {account.address}\n")

    def sign_message(message: str) -> str:
        signed = account.sign_message(encode_defunct(text=message))
        return Web3.to_hex(signed.signature)

    provider = EthWalletProvider(
        domain="localhost",
        origin="http://localhost:3000",
        metrics=Metrics(enabled=False),
    )

    auth_method = provider.authenticate(
        address=account.address,
        sign_message=sign_message,
        chain="ethereum",
        expiration_length=1,
        expiration_unit="hours",
    )
    print(f"✓ Authenticated: {auth_method!r}")

    auth_sig = auth_sig_from_access_token(auth_method.access_token)
    message = SiweMessage.parse(auth_sig.signed_message)
    print(f"✓ Message for {message.domain} on chain {message.chain_id}, expires {message.expiration_time}")
    print("\nSigned message:")
    print(message.prepare_message())

    print(f"\n✓ Auth method id: {provider.get_auth_method_id()}")
    print(f"✓ Signature verifies: {provider.verify()}")


if __name__ == "__main__":
    main()
