"""Authentication status routes."""
from fastapi import APIRouter

from fairplay.calendar.client import has_valid_credentials

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/status")
async def auth_status():
    """
    Check if calendar credentials for sending invitations are configured.

    Without credentials the reveal and attendance jobs still run; only the
    invitation job fails until a refresh token is configured.
    """
    authenticated = has_valid_credentials()
    return {
        "authenticated": authenticated,
        "message": (
            "Credentials configured"
            if authenticated
            else "Run 'python scripts/get_token.py' to enable calendar invitations"
        ),
    }
