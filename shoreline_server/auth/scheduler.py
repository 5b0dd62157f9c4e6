"""Shared-secret authorization for external schedulers.

Cron jobs (Vercel Cron, GitHub Actions, a crontab with curl...) cannot hold
an admin session, so the media cleanup endpoint also accepts

    Authorization: Bearer <SHORELINE_CRON_SECRET>
"""

import hmac

from shoreline_server.utils import parse_bearer_token


def is_scheduler_authorized(
    authorization: str | None,
    secret: str | None,
    min_length: int = 16,
) -> bool:
    """Return True if the header carries the configured shared secret.

    A secret shorter than `min_length` disables this kind of
    authorization, and so does a presented token shorter than that.
    """
    if not secret or len(secret) < min_length:
        return False

    token = parse_bearer_token(authorization)
    if token is None or len(token) < min_length:
        return False

    return hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))
