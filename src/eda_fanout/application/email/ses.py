"""Application email – SesEmailSender (requires 'aws' extra)."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from eda_fanout.application.email.message import EmailMessage
from eda_fanout.kernel.errors import ExternalServiceError

__all__ = ["SesConfig", "SesEmailSender"]


def _require_aiobotocore() -> Any:  # pragma: no cover
    try:
        import aiobotocore.session  # noqa: PLC0415
        return aiobotocore.session
    except ImportError as exc:
        raise ImportError(
            "aiobotocore is required for SES email sending. "
            "Install it with: pip install 'eda-fanout[aws]'"
        ) from exc


@dataclass
class SesConfig:
    region_name: str = "eu-west-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    source_email: str = "noreply@example.com"


class SesEmailSender:
    """EmailSender that sends via AWS SES using ``aiobotocore``."""

    def __init__(self, config: SesConfig) -> None:
        self._config = config

    @staticmethod
    def build_request(source: str, message: EmailMessage) -> dict[str, Any]:
        dest: dict[str, Any] = {"ToAddresses": message.to}
        if message.cc:
            dest["CcAddresses"] = message.cc
        body: dict[str, Any] = {"Html": {"Data": message.html_body, "Charset": "UTF-8"}}
        if message.text_body:
            body["Text"] = {"Data": message.text_body, "Charset": "UTF-8"}
        request: dict[str, Any] = {
            "Source": source,
            "Destination": dest,
            "Message": {
                "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                "Body": body,
            },
        }
        if message.reply_to:
            request["ReplyToAddresses"] = [message.reply_to]
        return request

    async def send(self, message: EmailMessage) -> str:  # pragma: no cover
        from botocore.exceptions import BotoCoreError, ClientError  # noqa: PLC0415

        session = _require_aiobotocore().get_session()
        kwargs: dict[str, Any] = {}
        if self._config.aws_access_key_id:
            kwargs["aws_access_key_id"] = self._config.aws_access_key_id
            kwargs["aws_secret_access_key"] = self._config.aws_secret_access_key
        async with session.create_client("ses", region_name=self._config.region_name, **kwargs) as client:
            try:
                resp = await client.send_email(**self.build_request(self._config.source_email, message))
            except (BotoCoreError, ClientError) as exc:
                raise ExternalServiceError("ses", str(exc), cause=exc) from exc
            return resp.get("MessageId", str(uuid.uuid4()))
