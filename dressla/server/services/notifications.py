"""
Transactional e-mail.

Mail is handed to an HTTP e-mail provider. Without a configured endpoint
(local development, tests) the message is only logged.
"""

from __future__ import annotations

from typing import Optional

import httpx

from dressla.core.logging_config import get_logger
from dressla.server.core.config import EmailConfig, settings

logger = get_logger(__name__)


class NotificationError(Exception):
    """The e-mail provider rejected or did not receive a message."""


def registration_code_message(code: str, ttl_minutes: int) -> dict[str, str]:
    return {
        "subject": "Dressla registration code",
        "text": (
            f"Your Dressla registration code is {code}.\n"
            f"It expires in {ttl_minutes} minutes. If you did not request it, ignore this e-mail."
        ),
    }


async def send_email(
    to: str,
    subject: str,
    text: str,
    config: Optional[EmailConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """POST one message to the provider. Returns False when delivery is not configured.

    Raises:
        NotificationError: the provider was unreachable or answered with an error.
    """
    config = config or settings.email
    if not config.api_url:
        logger.info(f"E-mail delivery not configured; message '{subject}' for {to} was not sent")
        return False

    headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}
    payload = {"from": config.sender, "to": [to], "subject": subject, "text": text}
    try:
        if client is not None:
            response = await client.post(config.api_url, json=payload, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=10.0) as owned:
                response = await owned.post(config.api_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise NotificationError(f"E-mail provider unreachable: {e}") from e
    if response.is_error:
        raise NotificationError(f"E-mail provider answered {response.status_code}")
    logger.info(f"Sent '{subject}' to {to}")
    return True


async def send_registration_code(
    email: str,
    code: str,
    config: Optional[EmailConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    message = registration_code_message(code, settings.marketplace.registration_code_ttl_minutes)
    return await send_email(email, message["subject"], message["text"], config=config, client=client)
