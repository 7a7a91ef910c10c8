#!/usr/bin/env python3
"""
One-time script to obtain the Google OAuth refresh token used for invitations.

Run it once as the organizer account whose calendar should send the
invitations, then add the printed token to your .env file.

Usage:
    python scripts/get_token.py [--client-id=XXX --client-secret=YYY]

GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are read from .env when not
passed as arguments.
"""
import argparse
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from google_auth_oauthlib.flow import InstalledAppFlow

from fairplay.calendar.client import SCOPES, TOKEN_URI
from fairplay.core.config import settings

REDIRECT_URI = "http://localhost:8080/"


def build_flow(client_id: str, client_secret: str) -> InstalledAppFlow:
    """OAuth flow for an installed app with a manual copy-paste redirect."""
    client_config = {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": TOKEN_URI,
            "redirect_uris": [REDIRECT_URI],
        }
    }
    flow = InstalledAppFlow.from_client_config(client_config, SCOPES)
    flow.redirect_uri = REDIRECT_URI
    return flow


def main():
    parser = argparse.ArgumentParser(description="Get Google OAuth refresh token")
    parser.add_argument("--client-id", default=settings.google_client_id)
    parser.add_argument("--client-secret", default=settings.google_client_secret)
    args = parser.parse_args()

    if not args.client_id or not args.client_secret:
        print("Error: GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are required.")
        print("Set them in .env or pass --client-id and --client-secret.")
        sys.exit(1)

    flow = build_flow(args.client_id, args.client_secret)

    # The redirect goes to plain-HTTP localhost and is pasted back by hand
    os.environ["OAUTHLIB_INSECURE_TRANSPORT"] = "1"

    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    print("Sign in as the organizer account and open this URL in a browser:")
    print()
    print(auth_url)
    print()
    print("After authorizing you are redirected to a localhost URL that will")
    print("not load. Copy that full URL from the address bar.")
    print()

    redirect_response = input("Paste the full redirect URL here: ").strip()
    flow.fetch_token(authorization_response=redirect_response)

    print()
    print("Add the following to your .env file:")
    print()
    print(f"GOOGLE_REFRESH_TOKEN={flow.credentials.refresh_token}")


if __name__ == "__main__":
    main()
