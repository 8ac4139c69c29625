import hashlib
import hmac
import json

import httpx
import pytest

from polleria.core.exceptions import NotificationFailure
from polleria.integrations.whatsapp import (
    WhatsAppCloudClient,
    parse_inbound_message,
    verify_signature,
    verify_subscription,
)


def make_payload(text="Quiero 2 pollos fritos", phone="5218112345678", msg_type="text"):
    message = {"from": phone, "id": "wamid.ABC", "timestamp": "1700000000", "type": msg_type}
    if msg_type == "text":
        message["text"] = {"body": text}
    return {
        "object": "whatsapp_business_account",
        "entry": [{
            "id": "123",
            "changes": [{
                "field": "messages",
                "value": {"messaging_product": "whatsapp", "messages": [message]},
            }],
        }],
    }


def sign(secret: str, body: bytes) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


# ========== parse_inbound_message ==========

def test_parse_text_message():
    message = parse_inbound_message(make_payload("  Quiero alitas  "))
    
    assert message.phone == "5218112345678"
    assert message.text == "Quiero alitas"
    assert message.message_id == "wamid.ABC"
    assert message.timestamp == "1700000000"


def test_parse_ignores_other_objects():
    payload = make_payload()
    payload["object"] = "page"
    assert parse_inbound_message(payload) is None


def test_parse_ignores_status_updates():
    payload = make_payload()
    payload["entry"][0]["changes"][0]["value"] = {"statuses": [{"status": "delivered"}]}
    assert parse_inbound_message(payload) is None


def test_parse_ignores_media_messages():
    assert parse_inbound_message(make_payload(msg_type="image")) is None


def test_parse_ignores_empty_text():
    assert parse_inbound_message(make_payload(text="   ")) is None


def test_parse_ignores_other_fields():
    payload = make_payload()
    payload["entry"][0]["changes"][0]["field"] = "message_template_status_update"
    assert parse_inbound_message(payload) is None


@pytest.mark.parametrize("payload", [None, [], "text", {"object": "whatsapp_business_account", "entry": "x"}, {"object": "whatsapp_business_account", "entry": []}])
def test_parse_malformed_payloads(payload):
    assert parse_inbound_message(payload) is None


# ========== Signatures and handshake ==========

def test_verify_signature():
    body = json.dumps(make_payload()).encode()
    
    assert verify_signature("secret", body, sign("secret", body))
    assert not verify_signature("secret", body, sign("other", body))
    assert not verify_signature("secret", body + b" ", sign("secret", body))
    assert not verify_signature("secret", body, None)


def test_verify_subscription(settings):
    token = settings.WHATSAPP_VERIFY_TOKEN
    
    assert verify_subscription(settings, "subscribe", token, "12345") == "12345"
    assert verify_subscription(settings, "subscribe", "wrong", "12345") is None
    assert verify_subscription(settings, "unsubscribe", token, "12345") is None


# ========== Outbound client ==========

@pytest.mark.asyncio
async def test_send_text_posts_to_graph_api(settings):
    captured = {}
    
    def handler(request: httpx.Request):
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"messages": [{"id": "wamid.OUT"}]})
    
    settings.WHATSAPP_ACCESS_TOKEN = "token"
    settings.WHATSAPP_PHONE_NUMBER_ID = "1055"
    client = WhatsAppCloudClient(settings, transport=httpx.MockTransport(handler))
    
    result = await client.send_text("+52 811 234 5678", "Hola")
    
    assert result.delivered
    assert result.message_id == "wamid.OUT"
    assert captured["url"] == "https://graph.facebook.com/v21.0/1055/messages"
    assert captured["auth"] == "Bearer token"
    assert captured["body"]["to"] == "528112345678"
    assert captured["body"]["text"]["body"] == "Hola"


@pytest.mark.asyncio
async def test_send_text_raises_on_api_error(settings):
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Invalid OAuth access token"}})
    
    settings.WHATSAPP_ACCESS_TOKEN = "expired"
    settings.WHATSAPP_PHONE_NUMBER_ID = "1055"
    client = WhatsAppCloudClient(settings, transport=httpx.MockTransport(handler))
    
    with pytest.raises(NotificationFailure, match="Invalid OAuth"):
        await client.send_text("8112345678", "Hola")


@pytest.mark.asyncio
async def test_send_text_unconfigured(settings):
    client = WhatsAppCloudClient(settings)
    with pytest.raises(NotificationFailure):
        await client.send_text("8112345678", "Hola")
