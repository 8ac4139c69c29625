"""
WhatsApp Business Cloud API Client (Meta Graph API)
API Documentation: https://developers.facebook.com/docs/whatsapp/cloud-api
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from polleria.core.config import Settings
from polleria.core.exceptions import NotificationFailure
from polleria.core.phone import to_wa_id

logger = logging.getLogger(__name__)


@dataclass
class InboundMessage:
    """A text message extracted from a webhook delivery"""
    phone: str
    text: str
    message_id: Optional[str] = None
    timestamp: Optional[str] = None


@dataclass
class SendResult:
    delivered: bool
    message_id: Optional[str] = None


# ========== Webhook helpers ==========

def parse_inbound_message(payload: Any) -> Optional[InboundMessage]:
    """
    Extract the first text message of a webhook delivery.
    
    Expected shape:
    {object: "whatsapp_business_account",
     entry: [{changes: [{field: "messages",
                         value: {messages: [{from, type: "text", text: {body}, id, timestamp}]}}]}]}
    
    Returns None for anything else: statuses, media, empty text, malformed JSON.
    """
    if not isinstance(payload, dict):
        return None
    if payload.get("object") != "whatsapp_business_account":
        return None
    
    entries = payload.get("entry") or []
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        return None
    
    changes = entries[0].get("changes") or []
    if not isinstance(changes, list) or not changes or not isinstance(changes[0], dict):
        return None
    change = changes[0]
    if change.get("field") != "messages":
        return None
    
    value = change.get("value") or {}
    messages = value.get("messages") if isinstance(value, dict) else None
    if not isinstance(messages, list) or not messages or not isinstance(messages[0], dict):
        return None
    message = messages[0]
    if message.get("type") != "text":
        return None
    
    phone = message.get("from")
    text = (message.get("text") or {}).get("body") if isinstance(message.get("text"), dict) else None
    if not phone or not isinstance(text, str) or not text.strip():
        return None
    
    return InboundMessage(
        phone=str(phone),
        text=text.strip(),
        message_id=message.get("id"),
        timestamp=message.get("timestamp"),
    )


def verify_signature(app_secret: str, payload: bytes, signature: Optional[str]) -> bool:
    """
    Verify X-Hub-Signature-256 header
    signature = "sha256=" + HMAC-SHA256(app_secret, raw_body)
    """
    if not signature:
        return False
    expected = "sha256=" + hmac.new(
        app_secret.encode(),
        payload,
        hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)


def verify_subscription(settings: Settings, mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
    """Return the challenge to echo back if Meta's handshake is valid"""
    if mode == "subscribe" and token == settings.WHATSAPP_VERIFY_TOKEN:
        logger.info("Webhook subscription verified")
        return challenge or ""
    logger.warning(f"Webhook verification failed (mode={mode})")
    return None


# ========== Outbound client ==========

class WhatsAppCloudClient:
    """
    Sends text messages through the Cloud API
    """
    PLATFORM_NAME = "whatsapp"
    BASE_URL = "https://graph.facebook.com"
    
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.access_token = settings.WHATSAPP_ACCESS_TOKEN
        self.phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID
        self.api_version = settings.WHATSAPP_API_VERSION
        self.country_code = settings.DEFAULT_COUNTRY_CODE
        self.timeout = settings.WHATSAPP_TIMEOUT_SECONDS
        self._transport = transport
        
        if not self.configured:
            logger.warning("WhatsApp Business API not configured (WHATSAPP_ACCESS_TOKEN, WHATSAPP_PHONE_NUMBER_ID). Messages will not be sent.")
    
    @property
    def configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)
    
    @property
    def messages_url(self) -> str:
        return f"{self.BASE_URL}/{self.api_version}/{self.phone_number_id}/messages"
    
    async def send_text(self, to: str, body: str) -> SendResult:
        """
        Send a text message.
        Raises NotificationFailure when the channel is not configured or Meta rejects the call.
        """
        if not self.configured:
            raise NotificationFailure("WhatsApp Business API not configured")
        
        payload = {
            "messaging_product": "whatsapp",
            "to": to_wa_id(to, self.country_code),
            "type": "text",
            "text": {"preview_url": False, "body": body},
        }
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.messages_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise NotificationFailure(f"WhatsApp request failed: {e}") from e
        
        self._log_api_call("POST", "/messages", response.status_code)
        
        try:
            data: Dict[str, Any] = response.json()
        except ValueError:
            data = {}
        
        if response.status_code >= 400:
            error = data.get("error", {}) if isinstance(data, dict) else {}
            message = error.get("message") or response.text[:200]
            raise NotificationFailure(f"WhatsApp API Error {response.status_code}: {message}")
        
        messages = data.get("messages") or [{}]
        return SendResult(delivered=True, message_id=messages[0].get("id"))
    
    def _log_api_call(self, method: str, endpoint: str, status_code: int):
        """Log API call for debugging"""
        logger.info(f"[{self.PLATFORM_NAME}] {method} {endpoint} -> {status_code}")
