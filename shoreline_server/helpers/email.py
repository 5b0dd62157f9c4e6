import httpx

from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import (
    ServerMisconfiguredException,
    ShorelineException,
)
from shoreline_server.logging import log_traceback, logger


def is_mailing_enabled() -> bool:
    """Check whether all Mailgun settings are present"""
    missing = [
        key
        for key in ("mailgun_api_key", "mailgun_domain", "mailgun_from", "mailgun_to")
        if not getattr(shorelineconfig, key)
    ]
    if missing:
        logger.error(f"Mailing is not configured. Missing: {', '.join(missing)}")
        return False
    return True


async def send_mail(
    subject: str,
    text: str,
    reply_to: str | None = None,
    recipient: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Send a plain text message using the Mailgun API.

    By default the message goes to the configured contact
    recipient (mailgun_to).
    """
    if not is_mailing_enabled():
        raise ServerMisconfiguredException("Email is not configured")

    host = shorelineconfig.mailgun_host.rstrip("/")
    url = f"{host}/v3/{shorelineconfig.mailgun_domain}/messages"

    payload = {
        "from": shorelineconfig.mailgun_from,
        "to": recipient or shorelineconfig.mailgun_to,
        "subject": subject,
        "text": text,
    }
    if reply_to:
        payload["h:Reply-To"] = reply_to

    auth = ("api", shorelineconfig.mailgun_api_key or "")

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=shorelineconfig.http_timeout) as c:
                response = await c.post(url, data=payload, auth=auth)
        else:
            response = await client.post(url, data=payload, auth=auth)
    except httpx.HTTPError as e:
        log_traceback("Unable to connect to Mailgun")
        raise ShorelineException("Error while sending email") from e

    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"Mailgun error {response.status_code}: {response.text[:500]}")
        raise ShorelineException("Error while sending email") from e
