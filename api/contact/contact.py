"""Public contact form.

Messages are checked by Cloudflare Turnstile and delivered
to the business mailbox by Mailgun.
"""

from fastapi import Request

from shoreline_server.api.clientinfo import get_real_ip
from shoreline_server.api.dependencies import HttpClient
from shoreline_server.api.responses import ResponseFactory
from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import (
    BadRequestException,
    ServerMisconfiguredException,
    ShorelineException,
)
from shoreline_server.helpers.email import is_mailing_enabled, send_mail
from shoreline_server.helpers.turnstile import verify_turnstile
from shoreline_server.logging import logger
from shoreline_server.types import Field, OPModel

from .router import router


class ContactRequestModel(OPModel):
    name: str = Field("", title="Sender name")
    email: str = Field("", title="Sender e-mail")
    phone: str = Field("", title="Sender phone")
    subject: str = Field("", title="Subject")
    message: str = Field("", title="Message")
    turnstile_token: str | None = Field(
        None,
        alias="cf-turnstile-response",
        title="Turnstile token",
    )


class ContactResponseModel(OPModel):
    success: bool = True
    message: str = "Message sent."


def format_contact_message(payload: ContactRequestModel) -> str:
    lines = [
        f"Name: {payload.name.strip()}",
        f"Email: {payload.email.strip()}",
    ]
    if phone := payload.phone.strip():
        lines.append(f"Phone: {phone}")
    lines.append(f"Subject: {payload.subject.strip()}")
    lines.append("")
    lines.append(payload.message.strip())
    return "\n".join(lines)


def validate_contact_request(payload: ContactRequestModel) -> None:
    if not payload.turnstile_token:
        raise BadRequestException("Verification is required.")

    required = (payload.name, payload.email, payload.subject, payload.message)
    if not all(value.strip() for value in required):
        raise BadRequestException("Name, email, subject, and message are required.")

    if "@" not in payload.email:
        raise BadRequestException("Please provide a valid email address.")


@router.post(
    "/contact",
    responses={
        400: ResponseFactory.error(400),
        500: ResponseFactory.error(500),
    },
)
async def post_contact(
    request: Request,
    payload: ContactRequestModel,
    client: HttpClient,
) -> ContactResponseModel:
    """Send a message from the website contact form"""

    if not (shorelineconfig.turnstile_secret_key and is_mailing_enabled()):
        raise ServerMisconfiguredException("Contact form is not configured.")

    validate_contact_request(payload)

    assert payload.turnstile_token is not None
    verified = await verify_turnstile(
        payload.turnstile_token,
        remote_ip=get_real_ip(request),
        client=client,
    )
    if not verified:
        raise BadRequestException("Verification failed. Please try again.")

    subject = payload.subject.strip()
    try:
        await send_mail(
            subject=subject,
            text=format_contact_message(payload),
            reply_to=payload.email.strip(),
            client=client,
        )
    except ShorelineException as e:
        raise ShorelineException(
            "Failed to send message. Please try again later."
        ) from e

    logger.info(f"Contact form message sent: {subject}")
    return ContactResponseModel()
