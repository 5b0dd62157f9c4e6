"""Cloudflare Turnstile verification of public form posts"""

import httpx

from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import (
    ServerMisconfiguredException,
    ShorelineException,
)
from shoreline_server.logging import logger


async def verify_turnstile(
    token: str,
    remote_ip: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Return True if Turnstile accepts the token"""
    if not shorelineconfig.turnstile_secret_key:
        raise ServerMisconfiguredException("Turnstile is not configured")

    payload = {
        "secret": shorelineconfig.turnstile_secret_key,
        "response": token,
    }
    if remote_ip:
        payload["remoteip"] = remote_ip

    url = shorelineconfig.turnstile_verify_url
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=shorelineconfig.http_timeout) as c:
                res = await c.post(url, data=payload)
        else:
            res = await client.post(url, data=payload)
        data = res.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Turnstile verification failed: {e}")
        raise ShorelineException("Unable to verify the request") from e

    if not data.get("success"):
        logger.debug(f"Turnstile rejected a token: {data.get('error-codes')}")
        return False
    return True
