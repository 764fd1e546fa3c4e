# eato/infra/mailer.py
"""
Transactional email over the Resend HTTP API.
"""

from __future__ import annotations

import httpx

from eato.common.logger import log_error, log_info, log_warning
from eato.common.constants import TypeMsg


class Mailer:
    """Sends HTML email through Resend."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self.sender = sender
        self._api_url = api_url
        self._timeout = timeout
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, to: str | None, subject: str, html: str) -> bool:
        """
        Sends a single email.

        Returns:
            True when the provider accepted the message. Failures are
            logged and reported as False, never raised.
        """
        if not to:
            await log_warning(f"Skipping email without recipient: {subject}")
            return False

        if not self.is_configured:
            await log_warning(
                f"RESEND_API_KEY not set, email not sent: {subject}",
                extra={"to": to},
            )
            return False

        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(self._api_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            await log_error(f"Email transport error: {e}", extra={"to": to, "subject": subject})
            return False

        if response.status_code >= 400:
            await log_error(
                f"Email provider rejected message: {response.status_code} {response.text}",
                extra={"to": to, "subject": subject},
            )
            return False

        await log_info(f"Email sent: {subject}", type_msg=TypeMsg.DEBUG, extra={"to": to})
        return True


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """Returns the process-wide Mailer built from settings."""
    global _mailer
    if _mailer is None:
        from eato.config import settings
        _mailer = Mailer(
            api_key=settings.email.RESEND_API_KEY,
            sender=settings.email.EMAIL_FROM,
            api_url=settings.email.RESEND_API_URL,
            timeout=settings.email.EMAIL_TIMEOUT,
        )
    return _mailer
