"""Plaid API secrets in the OS keychain.

Values live under the ``finance-tracker`` service name in whatever backend
``keyring`` picks (macOS Keychain, Secret Service, Windows Credential
Locker). ``keyring`` is imported inside each function so tests can swap it
through ``sys.modules``. Backend failures never raise: reads return
``None`` and writes return ``False``.
"""

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "finance-tracker"

# Settings fields that may be read from (and written to) the keychain
CREDENTIAL_KEYS: frozenset[str] = frozenset({"PLAID_CLIENT_ID", "PLAID_SECRET"})


def _is_credential_key(key: str, action: str) -> bool:
    if key in CREDENTIAL_KEYS:
        return True
    logger.warning("Refusing to %s %s: not a Plaid credential", action, key)
    return False


def get_credential(key: str) -> str | None:
    """Look up ``key`` (e.g. ``"PLAID_SECRET"``); ``None`` when absent or unreadable."""
    import keyring

    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("Keychain read of %s failed", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Save a non-blank Plaid credential.

    Returns:
        ``True`` once stored; ``False`` for an unknown key, a blank value
        or a keychain error.
    """
    if not _is_credential_key(key, "store"):
        return False
    if not value or not value.strip():
        logger.warning("Refusing to store a blank value for %s", key)
        return False

    import keyring

    try:
        keyring.set_password(SERVICE_NAME, key, value)
    except Exception:
        logger.warning("Keychain write of %s failed", key, exc_info=True)
        return False
    logger.info("Saved %s to the keychain", key)
    return True


def delete_credential(key: str) -> bool:
    """Remove a stored Plaid credential. ``False`` if it was not there."""
    if not _is_credential_key(key, "delete"):
        return False

    import keyring

    try:
        keyring.delete_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("Keychain delete of %s failed", key, exc_info=True)
        return False
    logger.info("Removed %s from the keychain", key)
    return True
