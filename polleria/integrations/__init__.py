"""
External integrations: WhatsApp Cloud API and message interpreters
"""
from .base import BaseInterpreter
from .gemini import GeminiInterpreter
from .keyword_interpreter import KeywordInterpreter
from .whatsapp import (
    InboundMessage,
    SendResult,
    WhatsAppCloudClient,
    parse_inbound_message,
    verify_signature,
    verify_subscription,
)

__all__ = [
    "BaseInterpreter",
    "GeminiInterpreter",
    "KeywordInterpreter",
    "InboundMessage",
    "SendResult",
    "WhatsAppCloudClient",
    "parse_inbound_message",
    "verify_signature",
    "verify_subscription",
]
