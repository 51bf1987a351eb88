"""
Telegram Bot API client for integration messages
"""

from typing import Any, Dict, Optional
import logging
import httpx

from backshop.core.config import settings
from backshop.core.exceptions import NotificationDeliveryException, BadRequestException
from backshop.models.integration import Integration

logger = logging.getLogger(__name__)

class TelegramService:
    """Sends messages through a Telegram integration's bot"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.TELEGRAM_API_BASE_URL.rstrip("/")
        self.timeout = settings.TELEGRAM_TIMEOUT_SECONDS
        self.transport = transport

    async def send_message(
        self,
        integration: Integration,
        text: str,
        chat_id: Optional[str] = None,
        parse_mode: str = "HTML",
        disable_web_page_preview: bool = False
    ) -> Dict[str, Any]:
        """
        Send text message to a chat or group

        Args:
            integration: Telegram integration holding the bot token
            text: Message body
            chat_id: Target chat; defaults to the integration chat
            parse_mode: Telegram parse mode
            disable_web_page_preview: Suppress link previews

        Returns:
            Dict with success flag and message_id

        Raises:
            BadRequestException: If bot token or chat ID is missing
            NotificationDeliveryException: If Telegram rejects or the request fails
        """
        bot_token = integration.bot_token or integration.token
        if not bot_token:
            raise BadRequestException("Telegram bot token is not configured")

        target_chat_id = chat_id or integration.chat_id
        if not target_chat_id:
            raise BadRequestException("Chat ID is not configured")

        payload = {
            "chat_id": target_chat_id,
            "text": text,
            "parse_mode": parse_mode,
            "disable_web_page_preview": disable_web_page_preview,
        }
        data = await self._call(bot_token, "sendMessage", payload)
        result = data.get("result")

        return {
            "success": True,
            "message_id": result.get("message_id") if isinstance(result, dict) else None,
        }

    async def get_bot_info(self, integration: Integration) -> Dict[str, Any]:
        """Get bot profile, useful to verify the token"""
        bot_token = integration.bot_token or integration.token
        if not bot_token:
            raise BadRequestException("Telegram bot token is not configured")

        data = await self._call(bot_token, "getMe")
        return data.get("result") or {}

    async def _call(self, bot_token: str, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}/bot{bot_token}/{method}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload or {})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise NotificationDeliveryException(
                f"Telegram {method} failed with status {e.response.status_code}"
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise NotificationDeliveryException(f"Telegram {method} failed: {str(e)}")

        if not isinstance(data, dict):
            raise NotificationDeliveryException(f"Telegram {method} returned an unexpected response")
        if not data.get("ok", False):
            raise NotificationDeliveryException(
                f"Telegram {method} rejected: {data.get('description', 'unknown error')}"
            )

        return data
