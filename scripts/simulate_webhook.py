"""
Send a signed WhatsApp webhook to a running server.
Usage: python scripts/simulate_webhook.py "Quiero 2 pollos fritos" 5218112345678
"""
import hashlib
import hmac
import json
import os
import sys
import time

import httpx

# Config
BASE_URL = os.getenv("BASE_URL", "http://localhost:9202")
WEBHOOK_URL = f"{BASE_URL}/api/whatsapp/webhook"
APP_SECRET = os.getenv("WHATSAPP_APP_SECRET", "")

text = sys.argv[1] if len(sys.argv) > 1 else "Quiero 2 pollos fritos"
phone = sys.argv[2] if len(sys.argv) > 2 else "5218112345678"

payload = {
    "object": "whatsapp_business_account",
    "entry": [{
        "id": "simulated",
        "changes": [{
            "field": "messages",
            "value": {
                "messaging_product": "whatsapp",
                "messages": [{
                    "from": phone,
                    "id": f"wamid.sim{int(time.time())}",
                    "timestamp": str(int(time.time())),
                    "type": "text",
                    "text": {"body": text},
                }],
            },
        }],
    }],
}

payload_bytes = json.dumps(payload).encode()
headers = {"Content-Type": "application/json"}

# Sign only when the server validates signatures
if APP_SECRET:
    signature = hmac.new(APP_SECRET.encode(), payload_bytes, hashlib.sha256).hexdigest()
    headers["X-Hub-Signature-256"] = f"sha256={signature}"

print(f"Sending webhook to {WEBHOOK_URL}...")
print(f"Payload: {json.dumps(payload, indent=2, ensure_ascii=False)}")

try:
    response = httpx.post(WEBHOOK_URL, content=payload_bytes, headers=headers)
    print(f"\nResponse Code: {response.status_code}")
    print(f"Response Body: {response.text}")
    
    if response.status_code == 200:
        print("\n✅ Webhook sent successfully!")
        print("Check backend logs to confirm processing.")
    else:
        print("\n❌ Webhook failed!")

except httpx.HTTPError as e:
    print(f"\n❌ Error: {e}")
