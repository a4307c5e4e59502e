"""
Routing of Firebase email action links.

Firebase sends users to a single action URL carrying `mode`, `oobCode` and
optionally `continueUrl`. The code itself is checked by Firebase when the
target page submits it; here we only pick the page.
"""

from typing import Mapping
from urllib.parse import urlencode

HOME = "/"
VERIFY_EMAIL_PAGE = "/verify-email"
RESET_PASSWORD_PAGE = "/reset-password-confirm"

VERIFY_MODES = {"verify", "verifyEmail"}
RESET_MODES = {"reset", "resetPassword"}


def resolve_auth_action(params: Mapping[str, str]) -> str:
    """
    Map action-link query parameters to the page handling them.

    All received parameters are forwarded. Without an oobCode, or when
    neither `mode` nor `continueUrl` identifies the action, the user goes
    home.
    """
    if not params.get("oobCode"):
        return HOME

    query = urlencode(dict(params))
    mode = params.get("mode") or ""
    if mode in VERIFY_MODES:
        return f"{VERIFY_EMAIL_PAGE}?{query}"
    if mode in RESET_MODES:
        return f"{RESET_PASSWORD_PAGE}?{query}"

    continue_url = params.get("continueUrl") or ""
    if "verify" in continue_url:
        return f"{VERIFY_EMAIL_PAGE}?{query}"
    if "reset" in continue_url:
        return f"{RESET_PASSWORD_PAGE}?{query}"
    return HOME
