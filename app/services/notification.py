# app/services/notification.py

"""
출고 신청 알림 이메일 발송기 모듈입니다.

발송기는 애플리케이션 lifespan에서 한 번 생성되어 app.state.notifier에 보관되며,
라우터는 dependencies.get_notifier를 통해 주입받습니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Tuple

import httpx

from app.core.exceptions import NotificationFailure

logger = logging.getLogger(__name__)


@dataclass
class OutboundNotice:
    """창고 담당자에게 보내는 출고 신청 내용."""
    warehouse_name: str
    manager_email: str
    items: List[Tuple[str, int]] = field(default_factory=list)  # (품목명, 수량)
    customer_name: str = ""
    customer_address: str = ""
    customer_contact: str = ""
    requester_name: str = ""
    remarks: str = ""

    def item_list(self) -> str:
        return ", ".join(f"{name} x{quantity}" for name, quantity in self.items)

    def template_params(self) -> dict:
        return {
            "warehouse_name": self.warehouse_name,
            "manager_email": self.manager_email,
            "item_list": self.item_list(),
            "customer_name": self.customer_name,
            "customer_address": self.customer_address,
            "customer_contact": self.customer_contact,
            "requester_name": self.requester_name,
            "remarks": self.remarks or "없음",
            "to_email": self.manager_email,
        }


class EmailProvider(ABC):
    """출고 신청 알림 발송기의 공통 인터페이스."""

    @abstractmethod
    async def send_outbound(self, notice: OutboundNotice) -> None:
        """알림 한 건을 보냅니다. 실패하면 NotificationFailure를 발생시킵니다."""

    async def aclose(self) -> None:
        return None


class NoopProvider(EmailProvider):
    async def send_outbound(self, notice: OutboundNotice) -> None:
        logger.info(
            "Email provider disabled; outbound notice for '%s' to %s not sent.",
            notice.warehouse_name, notice.manager_email,
        )


class EmailJSProvider(EmailProvider):
    """EmailJS REST API로 템플릿 메일을 발송합니다."""

    def __init__(
        self,
        *,
        api_url: str,
        service_id: str,
        template_id: str,
        public_key: str,
        private_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.private_key = private_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def build_payload(self, notice: OutboundNotice) -> dict:
        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": notice.template_params(),
        }
        if self.private_key:
            payload["accessToken"] = self.private_key
        return payload

    async def send_outbound(self, notice: OutboundNotice) -> None:
        logger.info("Sending outbound notice for '%s' to %s", notice.warehouse_name, notice.manager_email)
        try:
            response = await self._client.post(self.api_url, json=self.build_payload(notice))
        except httpx.HTTPError as e:
            logger.error("EmailJS request failed: %s", e)
            raise NotificationFailure(f"이메일 발송 실패: {e}") from e

        if response.status_code >= 400:
            logger.error("EmailJS rejected the message: %s %s", response.status_code, response.text)
            raise NotificationFailure(f"이메일 발송 실패: {response.status_code} {response.text}")

    async def aclose(self) -> None:
        await self._client.aclose()


def build_email_provider(settings) -> EmailProvider:
    """설정(EMAIL_PROVIDER)에 맞는 발송기를 생성합니다."""
    provider_name = (settings.EMAIL_PROVIDER or "").strip().lower()
    if provider_name in {"", "none", "noop", "disabled"}:
        return NoopProvider()
    if provider_name == "emailjs":
        missing = [
            key for key in ("EMAILJS_SERVICE_ID", "EMAILJS_TEMPLATE_ID", "EMAILJS_PUBLIC_KEY")
            if not getattr(settings, key)
        ]
        if missing:
            raise ValueError(f"EmailJS provider requires settings: {', '.join(missing)}")
        private_key = settings.EMAILJS_PRIVATE_KEY.get_secret_value() if settings.EMAILJS_PRIVATE_KEY else None
        return EmailJSProvider(
            api_url=settings.EMAILJS_API_URL,
            service_id=settings.EMAILJS_SERVICE_ID,
            template_id=settings.EMAILJS_TEMPLATE_ID,
            public_key=settings.EMAILJS_PUBLIC_KEY,
            private_key=private_key,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unsupported email provider: {provider_name}")
