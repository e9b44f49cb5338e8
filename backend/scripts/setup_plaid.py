#!/usr/bin/env python3
"""Interactive Plaid credential check.

Asks for a client_id/secret pair, proves it works by requesting a Link
token from the chosen environment, then offers to save the pair in the OS
keychain. Institutions are linked later from the browser with Plaid Link.

Usage:
    python scripts/setup_plaid.py

Keys are under Developers > Keys at https://dashboard.plaid.com/.
Sandbox and production each have their own secret.
"""

import sys
from pathlib import Path

# Allow running as a plain script from the backend directory
sys.path.insert(0, str(Path(__file__).parent.parent))

from integrations.exceptions import ProviderError
from integrations.plaid_client import PlaidClient
from services.credential_manager import set_credential

ENVIRONMENT_CHOICES = {"1": "sandbox", "2": "production"}


def _ask(prompt: str) -> str:
    value = input(prompt).strip()
    if not value:
        print(f"Error: {prompt.strip(': ')} is required")
        sys.exit(1)
    return value


def _choose_environment() -> str:
    print("\nPlaid environment:")
    for number, name in ENVIRONMENT_CHOICES.items():
        print(f"  {number}. {name}")
    choice = input("Choice [1]: ").strip() or "1"
    return ENVIRONMENT_CHOICES.get(choice, "sandbox")


def _offer_keychain_store(credentials: dict[str, str]) -> None:
    """Save each credential to the keychain if the user agrees."""
    answer = input("\nSave these credentials to the OS keychain? [Y/n] ").strip().lower()
    if answer not in ("", "y", "yes"):
        print("  Skipped keychain storage.")
        return
    for key, value in credentials.items():
        if set_credential(key, value):
            print(f"  Stored {key} in keychain")
        else:
            print(f"  Failed to store {key}")


def validate_credentials(client_id: str, secret: str, env: str) -> str:
    """Request a throwaway Link token with the given credentials.

    The redirect URI is left blank so a half-configured OAuth setup does not
    mask a credential problem.

    Raises:
        ProviderError: If Plaid rejects the credentials or cannot be reached.
    """
    client = PlaidClient(client_id=client_id, secret=secret, environment=env, redirect_uri="")
    return client.create_link_token()


def main():
    print("Plaid credential setup")
    print("-" * 22)

    client_id = _ask("Plaid client_id: ")
    secret = _ask("Plaid secret: ")
    env = _choose_environment()

    print(f"\nRequesting a Link token from {env}...")
    try:
        validate_credentials(client_id, secret, env)
    except ProviderError as e:
        print(f"Plaid rejected the request: {e.message}")
        print("Check that the secret belongs to the selected environment.")
        sys.exit(1)

    print("Credentials work.")
    print(f"Set PLAID_ENVIRONMENT={env} in backend/.env")

    _offer_keychain_store({"PLAID_CLIENT_ID": client_id, "PLAID_SECRET": secret})


if __name__ == "__main__":
    main()
