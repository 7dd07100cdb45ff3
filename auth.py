"""
Gmail OAuth helpers and the operator authentication CLI.

The MCP server only ever calls ``load_credentials``, which never opens a
browser. Obtaining a token is a separate step run by the operator:

    python auth.py login              # browser consent via a local redirect
    python auth.py url                # print a consent URL (headless hosts)
    python auth.py save-token CODE    # exchange the code from that URL
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow, InstalledAppFlow

from config import ServerConfig
from gmail_tools.audit import AuditLogger
from gmail_tools.errors import AuthenticationError, AuthenticationRequiredError

# Least-privilege scopes: read, send, and modify (labels only).
DEFAULT_SCOPES = (
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
)

MANUAL_REDIRECT_URI = "http://localhost"
AUTH_COMMAND_HINT = "python auth.py login"


def _resolve(path: str | Path) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else Path.cwd() / p


def _save_token(creds: Credentials, token_file: Path) -> None:
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(creds.to_json())


def _require_client_file(credentials_file: Path) -> None:
    if not credentials_file.exists():
        raise AuthenticationError(
            f"Gmail authentication failed. Missing OAuth client file at {credentials_file}. "
            "Download it from Google Cloud Console (OAuth client ID, Desktop app)."
        )


def load_credentials(
    credentials_path: str | Path,
    token_path: str | Path,
    scopes: Sequence[str] = DEFAULT_SCOPES,
) -> Credentials:
    """
    Returns valid user credentials from the stored token without user
    interaction. Refreshes an expired token and writes it back.

    Raises:
        AuthenticationError: the OAuth client file is missing
        AuthenticationRequiredError: no usable token; run the auth flow
    """
    scope_list = list(scopes)
    credentials_file = _resolve(credentials_path)
    token_file = _resolve(token_path)

    _require_client_file(credentials_file)

    if not token_file.exists():
        raise AuthenticationRequiredError(
            f"Authentication required. No token at {token_file}. Please run: {AUTH_COMMAND_HINT}"
        )

    try:
        creds = Credentials.from_authorized_user_file(str(token_file), scope_list)
    except (ValueError, OSError) as exc:
        raise AuthenticationRequiredError(
            f"Authentication required. Stored token is unreadable ({exc}). "
            f"Please run: {AUTH_COMMAND_HINT}"
        ) from exc

    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as exc:
            raise AuthenticationRequiredError(
                f"Authentication required. Token refresh failed ({exc}). "
                f"Please run: {AUTH_COMMAND_HINT}"
            ) from exc
        _save_token(creds, token_file)

    if not creds.valid:
        raise AuthenticationRequiredError(
            f"Authentication required. Please run: {AUTH_COMMAND_HINT}"
        )

    return creds


def run_local_flow(
    credentials_path: str | Path,
    token_path: str | Path,
    scopes: Sequence[str] = DEFAULT_SCOPES,
) -> Credentials:
    """
    Runs the browser consent flow and saves a new token, overwriting any
    previous one.
    """
    credentials_file = _resolve(credentials_path)
    _require_client_file(credentials_file)

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_file), list(scopes))
    creds = flow.run_local_server(port=0, prompt="consent", access_type="offline")
    _save_token(creds, _resolve(token_path))
    return creds


def _manual_flow(credentials_path: str | Path, scopes: Sequence[str]) -> Flow:
    credentials_file = _resolve(credentials_path)
    _require_client_file(credentials_file)
    # No PKCE verifier: the URL and the code exchange run in separate processes.
    return Flow.from_client_secrets_file(
        str(credentials_file),
        scopes=list(scopes),
        redirect_uri=MANUAL_REDIRECT_URI,
        autogenerate_code_verifier=False,
    )


def get_authorization_url(
    credentials_path: str | Path,
    scopes: Sequence[str] = DEFAULT_SCOPES,
) -> str:
    """Consent URL for the manual flow; the code comes back in the redirect."""
    flow = _manual_flow(credentials_path, scopes)
    authorization_url, _ = flow.authorization_url(
        access_type="offline",
        prompt="consent",  # Force consent to get refresh token
    )
    return authorization_url


def save_token_from_code(
    code: str,
    credentials_path: str | Path,
    token_path: str | Path,
    scopes: Sequence[str] = DEFAULT_SCOPES,
) -> Credentials:
    """Exchange an authorization code for tokens and save them."""
    flow = _manual_flow(credentials_path, scopes)
    flow.fetch_token(code=code)
    creds = flow.credentials
    _save_token(creds, _resolve(token_path))
    return creds


# =============================================================================
# CLI
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Authorize the secure Gmail MCP server")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("login", help="Run the browser consent flow and save the token")
    sub.add_parser("url", help="Print a consent URL for manual authorization")
    save = sub.add_parser("save-token", help="Exchange an authorization code for a token")
    save.add_argument("code", help="Authorization code from the redirect URL")
    return parser


def main(argv: Optional[Sequence[str]] = None, config: Optional[ServerConfig] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config or ServerConfig.from_env()
    audit = AuditLogger(config.audit_log_path, source="AUTH")

    try:
        if args.command == "login":
            run_local_flow(config.credentials_path, config.token_path)
            audit.info("OAuth token obtained successfully")
            print("Authentication succeeded; token cached at", config.token_path)
        elif args.command == "url":
            url = get_authorization_url(config.credentials_path)
            print("Visit this URL, approve access, then copy the 'code' parameter")
            print("from the address bar of the localhost redirect:")
            print(url)
            print("\nThen run: python auth.py save-token YOUR_AUTHORIZATION_CODE")
        else:
            save_token_from_code(args.code, config.credentials_path, config.token_path)
            audit.info("OAuth token saved from authorization code")
            print("Authentication succeeded; token cached at", config.token_path)
    except Exception as exc:
        audit.error(f"Authentication failed: {exc}")
        print(f"Authentication failed: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
