"""Google API credentials for the calendar and sheets adapters.

Two kinds of credential files are supported:

- a service-account key (share the calendar and spreadsheet with the
  service account's email address), or
- an authorized-user token created by ``python -m ttrpg_session_logger
  authorize`` from OAuth client secrets.
"""

import json
import logging
from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .config import ConfigurationError

LOG = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/spreadsheets",
]


def _is_service_account_file(path: Path) -> bool:
    try:
        with open(path) as f:
            return json.load(f).get("type") == "service_account"
    except (OSError, ValueError, AttributeError):
        return False


def load_credentials(credentials_file: str, token_file: str, scopes=SCOPES):
    """Load credentials for the Google APIs.

    A stored authorized-user token takes precedence; it is refreshed and
    re-saved when expired. Otherwise credentials_file must be a
    service-account key.

    Raises:
        ConfigurationError: If no usable credentials are found
    """
    token_path = Path(token_file)
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), scopes)
        if creds.expired and creds.refresh_token:
            LOG.info("Refreshing expired Google token")
            creds.refresh(Request())
            token_path.write_text(creds.to_json())
        if creds.valid:
            return creds
        LOG.warning("Stored Google token %s is not valid", token_path)

    creds_path = Path(credentials_file)
    if not creds_path.exists():
        raise ConfigurationError(
            f"Google credentials file not found: {credentials_file}",
            setting="GOOGLE_CREDENTIALS_FILE",
            value=credentials_file,
        )
    if not _is_service_account_file(creds_path):
        raise ConfigurationError(
            f"{credentials_file} is not a service-account key and no valid token "
            f"exists at {token_file}. Run the 'authorize' command first.",
            setting="GOOGLE_TOKEN_FILE",
            value=token_file,
        )

    LOG.debug("Using service account credentials from %s", creds_path)
    return service_account.Credentials.from_service_account_file(
        str(creds_path), scopes=scopes
    )


def authorize(client_secrets_file: str, token_file: str, scopes=SCOPES) -> Credentials:
    """Run the installed-app OAuth flow and store the resulting token."""
    secrets_path = Path(client_secrets_file)
    if not secrets_path.exists():
        raise ConfigurationError(
            f"OAuth client secrets file not found: {client_secrets_file}",
            setting="GOOGLE_CREDENTIALS_FILE",
            value=client_secrets_file,
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(secrets_path), scopes)
    creds = flow.run_local_server(port=0)

    token_path = Path(token_file)
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    LOG.info("Saved Google token to %s", token_path)
    return creds
