"""
AutoSendClient — transactional email over the AutoSend HTTP API.

Documentation: https://docs.autosend.com/api-reference

One send is one POST. There is no retry: a non-2xx answer becomes a
``ProviderError`` (429 keeps the provider's ``Retry-After``), a network
failure becomes a ``TransportError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from utils.errors import ConfigurationError, ProviderError, TransportError
from utils.schemas import EmailSendRequest

logger = logging.getLogger(__name__)

AUTOSEND_API_URL = "https://api.autosend.com/v1/mails/send"
DEFAULT_FROM_NAME = "The App"


@dataclass(frozen=True)
class AutoSendConfig:
    api_key: str
    from_email: str
    from_name: str = DEFAULT_FROM_NAME
    test_mode: bool = False
    api_url: str = AUTOSEND_API_URL
    timeout_seconds: Optional[float] = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AutoSendConfig":
        return cls(
            api_key=settings.autosend_api_key,
            from_email=settings.autosend_from_email,
            from_name=settings.autosend_from_name or DEFAULT_FROM_NAME,
            test_mode=settings.test_env,
            api_url=settings.autosend_api_url,
            timeout_seconds=settings.autosend_timeout_seconds,
        )

    def missing(self) -> list[str]:
        """Names of required env vars that are empty."""
        names = []
        if not self.api_key:
            names.append("AUTOSEND_API_KEY")
        if not self.from_email:
            names.append("AUTOSEND_FROM_EMAIL")
        return names


class AutoSendClient:
    """Thin async client for the AutoSend ``/mails/send`` endpoint."""

    def __init__(
        self,
        config: AutoSendConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def _check_config(self) -> None:
        if not self.config.api_key:
            raise ConfigurationError("AUTOSEND_API_KEY is not set in environment variables")
        if not self.config.from_email:
            raise ConfigurationError("AUTOSEND_FROM_EMAIL is not set in environment variables")

    def build_payload(self, request: EmailSendRequest) -> Dict[str, Any]:
        """Translate a send request into AutoSend's wire format."""
        payload: Dict[str, Any] = {
            "to": {
                "email": request.to.email,
                "name": request.to.name or request.to.email,
            },
            "from": {
                "email": self.config.from_email,
                "name": self.config.from_name or DEFAULT_FROM_NAME,
            },
        }
        # Optional fields are omitted, never sent as null
        if request.subject:
            payload["subject"] = request.subject
        if request.template_id:
            payload["templateId"] = request.template_id
        if request.html:
            payload["html"] = request.html
        if request.dynamic_data:
            payload["dynamicData"] = dict(request.dynamic_data)
        payload["test"] = self.config.test_mode
        return payload

    async def send_email(self, request: EmailSendRequest) -> Dict[str, Any]:
        """
        Send one email.

        Raises
        ------
        ConfigurationError
            API key or sender email missing. Raised before any request.
        ProviderError
            AutoSend answered with a non-2xx status.
        TransportError
            AutoSend could not be reached.
        """
        self._check_config()
        payload = self.build_payload(request)
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.timeout_seconds,
            ) as client:
                response = await client.post(self.config.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Failed to send email via AutoSend: %s", exc)
            raise TransportError(f"AutoSend request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text} if response.text else {}

        if not response.is_success:
            logger.error("AutoSend API Error: %s", data)
            message = data.get("message") if isinstance(data, dict) else None
            raise ProviderError(
                message or f"AutoSend API request failed with status {response.status_code}",
                provider_status=response.status_code,
                body=data,
                retry_after=response.headers.get("retry-after") if response.status_code == 429 else None,
            )

        inner = data.get("data") if isinstance(data, dict) else None
        email_id = inner.get("emailId") if isinstance(inner, dict) else None
        logger.info("Email sent successfully: %s", email_id)
        return data
