"""
Gemini Message Interpreter
API Documentation: https://ai.google.dev/api/generate-content
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from polleria.core.config import Settings
from polleria.core.exceptions import InterpreterError, NotAnOrder
from polleria.schemas.intake import CatalogEntry, OrderIntent
from .base import BaseInterpreter

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """Eres el asistente de pedidos de una pollería. Analiza el mensaje de WhatsApp de un cliente y extrae el pedido.

Catálogo disponible (JSON):
{catalog}

Mensaje del cliente ({phone}):
\"\"\"{message}\"\"\"

Responde ÚNICAMENTE con un objeto JSON con esta forma:
{{
  "is_order": true o false,
  "products": [{{"name": "nombre del producto", "quantity": 1, "product_id": id del catálogo o null}}],
  "payment_method": "efectivo" | "tarjeta" | "transferencia" | null,
  "delivery_address": "dirección de entrega" o null,
  "customer_name": "nombre del cliente si lo menciona" o null,
  "notes": "instrucciones adicionales" o null,
  "total": número o 0
}}

Reglas:
- Si el mensaje no pide productos (saludos, preguntas generales), usa "is_order": false y "products": [].
- Si no se indica la cantidad, usa 1. Para productos por kilo la cantidad puede ser decimal (1.5).
- Usa "product_id" solo si el producto del catálogo es inequívoco.
- "total" es 0 si no se puede calcular con certeza."""

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class GeminiInterpreter(BaseInterpreter):
    """
    Interprets order messages with Gemini generateContent
    """
    NAME = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = settings.GEMINI_API_KEY
        self.model = settings.GEMINI_MODEL
        self.timeout = settings.GEMINI_TIMEOUT_SECONDS
        self._transport = transport
    
    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/{self.model}:generateContent"
    
    def build_prompt(self, text: str, phone: str, catalog: List[CatalogEntry]) -> str:
        catalog_json = json.dumps(
            [{"id": p.id, "nombre": p.name, "precio": float(p.price)} for p in catalog],
            ensure_ascii=False,
        )
        return PROMPT_TEMPLATE.format(catalog=catalog_json, phone=phone, message=text)
    
    async def interpret(self, text: str, phone: str, catalog: List[CatalogEntry]) -> OrderIntent:
        if not self.api_key:
            raise InterpreterError("GEMINI_API_KEY not configured")
        
        payload = {
            "contents": [{"parts": [{"text": self.build_prompt(text, phone, catalog)}]}],
            "generationConfig": {
                "temperature": 0.1,
                "maxOutputTokens": 1024,
                "responseMimeType": "application/json",
            },
        }
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise InterpreterError(f"Gemini request failed: {e}") from e
        
        logger.info(f"[{self.NAME}] POST {self.model}:generateContent -> {response.status_code}")
        if response.status_code != 200:
            raise InterpreterError(f"Gemini API Error {response.status_code}: {response.text[:200]}")
        
        answer = self._parse_answer(response.json())
        if not answer.pop("is_order", True) or not answer.get("products"):
            raise NotAnOrder("No se identificaron productos en el pedido")
        
        try:
            return OrderIntent.model_validate(answer)
        except ValidationError as e:
            raise InterpreterError(f"Gemini answer does not match the order schema: {e}") from e
    
    def _parse_answer(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Pull the JSON object out of candidates[0].content.parts[0].text"""
        try:
            raw = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise InterpreterError(f"Unexpected Gemini response structure: {e}") from e
        
        raw = _FENCE.sub("", raw.strip())
        try:
            answer = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InterpreterError(f"Gemini returned invalid JSON: {raw[:200]}") from e
        
        if not isinstance(answer, dict):
            raise InterpreterError("Gemini answer is not a JSON object")
        return answer
