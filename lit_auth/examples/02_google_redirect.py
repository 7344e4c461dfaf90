"""
Example 2: Google Redirect Flow

Walks the two halves of an OAuth redirect in one process: sign_in() builds
the gateway URL and stores the CSRF state, authenticate() validates the
callback. A real host sends the user to the login URL and receives the
callback on its redirect route.
"""

import sys
from urllib.parse import parse_qs, urlencode, urlsplit

from lit_auth import (
    CsrfError,
    GoogleProvider,
    InMemorySessionStore,
    RelayClient,
    get_provider,
)
from lit_auth.metrics import Metrics

REDIRECT_URI = "http://localhost:3000/callback"


def main():
    """Google redirect example."""
    store = InMemorySessionStore()
    provider: GoogleProvider = get_provider(
        "google",
        redirect_uri=REDIRECT_URI,
        session_store=store,
        relay=RelayClient(),
        metrics=Metrics(enabled=False),
    )

    login_url = provider.sign_in()
    print(f"1. Send the user to:\n   {login_url}\n")

    state = parse_qs(urlsplit(login_url).query)["state"][0]
    print("2. Paste the id_token the gateway returned (or Ctrl-D to stop):")
    id_token = sys.stdin.readline().strip()
    if not id_token:
        return

    query = urlencode({"provider": "google", "id_token": id_token, "state": state})
    callback = f"{REDIRECT_URI}?{query}"
    try:
        auth_method = provider.authenticate(callback)
    except CsrfError as e:
        print(f"❌ State check failed: {e}")
        return

    print(f"✓ Authenticated: {auth_method!r}")
    print(f"✓ Auth method id: {provider.get_auth_method_id()}")

    pkps = provider.fetch_pkps_through_relayer(auth_method)
    print(f"✓ {len(pkps)} PKP(s) registered for this Google account")


if __name__ == "__main__":
    main()
