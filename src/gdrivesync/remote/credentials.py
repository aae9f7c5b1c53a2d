"""Authorized-user credential loading for the Drive object store."""

from __future__ import annotations

import logging
import os
from typing import Sequence

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gdrivesync.errors import AuthError

logger = logging.getLogger(__name__)


def load_credentials(token_file: str, scopes: Sequence[str], *, persist: bool = True) -> Credentials:
    """
    Load OAuth credentials previously authorized for this user.

    The interactive consent flow is not run here: token_file must already
    hold an authorized-user JSON document (with a refresh token).

    Args:
        token_file: Path to the authorized-user JSON file.
        scopes: OAuth scopes.
        persist: Write refreshed credentials back to token_file.

    Returns:
        google.oauth2.credentials.Credentials

    Raises:
        AuthError: on missing file, load failure, refresh failure, or
            credentials that are still invalid after refresh.
    """
    if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
        raise AuthError("scopes must be a non-empty sequence of strings")

    if not os.path.exists(token_file):
        raise AuthError("token_file does not exist", details={"token_file": token_file})

    try:
        creds = Credentials.from_authorized_user_file(token_file, scopes=list(scopes))
    except Exception as exc:
        raise AuthError(
            "Failed to load token_file",
            details={"token_file": token_file},
            cause=exc,
        ) from exc

    if creds.valid:
        return creds

    if not creds.refresh_token:
        raise AuthError(
            "Credentials are invalid and cannot be refreshed",
            details={"token_file": token_file},
        )

    try:
        creds.refresh(Request())
    except Exception as exc:
        raise AuthError(
            "Failed to refresh OAuth credentials",
            details={"token_file": token_file},
            cause=exc,
        ) from exc
    logger.info("Refreshed OAuth credentials from %s", token_file)

    if persist:
        _save_credentials(creds, token_file)
    return creds


def _save_credentials(creds: Credentials, token_file: str) -> None:
    try:
        with open(token_file, "w", encoding="utf-8") as f:
            f.write(creds.to_json())
    except OSError as exc:
        raise AuthError(
            "Failed to save OAuth token file",
            details={"token_file": token_file},
            cause=exc,
        ) from exc
