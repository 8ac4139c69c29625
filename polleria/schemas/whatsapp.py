"""
WhatsApp API Schemas
"""
from pydantic import BaseModel
from typing import Optional

class TestMessageRequest(BaseModel):
    mensaje: Optional[str] = None
    telefono: Optional[str] = None

class InfoInstructions(BaseModel):
    numero: str
    mensaje: str

class InfoResponse(BaseModel):
    success: bool = True
    configurado: bool
    phoneNumberId: str
    instrucciones: InfoInstructions
