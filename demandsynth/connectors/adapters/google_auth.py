"""Google API credential loading shared by the Google connectors."""

from __future__ import annotations

from typing import Any

import google.auth
from google.oauth2 import credentials as user_credentials
from google.oauth2.service_account import Credentials


def load_google_credentials(info: dict[str, Any] | None, scopes: list[str]) -> Any:
    """Build Google credentials from a parsed credentials JSON document.

    Service account and authorized user documents are loaded directly.
    Anything else, including no document at all, falls back to application
    default credentials.

    Args:
        info: Parsed credentials JSON, or None.
        scopes: OAuth scopes to request.

    Returns:
        A google-auth credentials object.
    """
    cred_type = (info or {}).get("type")

    if cred_type == "service_account":
        return Credentials.from_service_account_info(info, scopes=scopes)
    if cred_type == "authorized_user":
        return user_credentials.Credentials.from_authorized_user_info(info, scopes=scopes)

    creds, _ = google.auth.default(scopes=scopes)
    return creds
