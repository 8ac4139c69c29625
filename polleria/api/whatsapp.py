"""
WhatsApp API Endpoints - Meta webhook, manual test runner and channel info
"""
import json
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from polleria.core import SessionLocal, Settings, get_settings
from polleria.core.exceptions import SignatureValidationFailure
from polleria.integrations import (
    GeminiInterpreter,
    InboundMessage,
    KeywordInterpreter,
    WhatsAppCloudClient,
    parse_inbound_message,
    verify_signature,
    verify_subscription,
)
from polleria.schemas.whatsapp import InfoInstructions, InfoResponse, TestMessageRequest
from polleria.services import IntakeOutcome, Notifier, OrderIntakeService

logger = logging.getLogger(__name__)

whatsapp_router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])


def get_intake_service(settings: Settings = Depends(get_settings)) -> OrderIntakeService:
    """Build the intake pipeline from settings (overridden in tests)"""
    if settings.GEMINI_API_KEY:
        interpreter = GeminiInterpreter(settings)
    else:
        interpreter = KeywordInterpreter()
    notifier = Notifier(WhatsAppCloudClient(settings))
    return OrderIntakeService(settings, SessionLocal, interpreter, notifier)


def check_signature(settings: Settings, body: bytes, signature: Optional[str]):
    """Raise SignatureValidationFailure unless X-Hub-Signature-256 matches the raw body"""
    if not settings.WHATSAPP_APP_SECRET:
        logger.warning("WHATSAPP_APP_SECRET not set, webhook signature validation disabled")
        return
    if not signature:
        raise SignatureValidationFailure("Missing X-Hub-Signature-256 header")
    if not verify_signature(settings.WHATSAPP_APP_SECRET, body, signature):
        raise SignatureValidationFailure("Invalid X-Hub-Signature-256")


async def process_inbound_message(service: OrderIntakeService, message: InboundMessage):
    """Background task to run one inbound message through the intake pipeline"""
    result = await service.process_message(message.text, message.phone)
    
    if result.outcome == IntakeOutcome.CREATED:
        logger.info(f"Order created from WhatsApp: {result.order_number} (message {message.message_id})")
    elif result.outcome == IntakeOutcome.IGNORED:
        logger.info(f"WhatsApp message {message.message_id} ignored: not an order")
    else:
        logger.error(f"WhatsApp message {message.message_id} failed at {result.failed_stage}: {result.error}")


# ========== Meta Webhook ==========

@whatsapp_router.get("/webhook")
async def verify_webhook(request: Request, settings: Settings = Depends(get_settings)):
    """
    Meta subscription handshake
    Echoes hub.challenge as plain text when hub.verify_token matches
    """
    params = request.query_params
    challenge = verify_subscription(
        settings,
        mode=params.get("hub.mode") or params.get("mode"),
        token=params.get("hub.verify_token") or params.get("verify_token"),
        challenge=params.get("hub.challenge") or params.get("challenge"),
    )
    if challenge is None:
        return PlainTextResponse("Forbidden", status_code=403)
    return PlainTextResponse(challenge)


@whatsapp_router.post("/webhook")
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    service: OrderIntakeService = Depends(get_intake_service),
):
    """
    Receive message notifications from Meta
    Always answers 200 OK so Meta does not retry; processing happens after the response
    """
    try:
        body = await request.body()
        
        try:
            check_signature(settings, body, request.headers.get("X-Hub-Signature-256"))
        except SignatureValidationFailure as e:
            logger.warning(f"{e}, ignoring payload")
            return PlainTextResponse("OK")
        
        try:
            payload = json.loads(body)
        except ValueError:
            logger.warning("WhatsApp webhook body is not valid JSON, ignoring")
            return PlainTextResponse("OK")
        
        message = parse_inbound_message(payload)
        if message is None:
            logger.debug("WhatsApp webhook without a text message (status update or media)")
            return PlainTextResponse("OK")
        
        logger.info(f"WhatsApp message {message.message_id} received from {message.phone}")
        background_tasks.add_task(process_inbound_message, service, message)
        
    except Exception as e:
        logger.error(f"WhatsApp webhook error: {e}")
    
    return PlainTextResponse("OK")


# ========== Manual Testing ==========

@whatsapp_router.post("/test")
async def test_message(
    data: TestMessageRequest,
    service: OrderIntakeService = Depends(get_intake_service),
):
    """Run the intake pipeline inline, without Meta"""
    if not data.mensaje or not data.telefono:
        raise HTTPException(status_code=400, detail="mensaje y telefono son requeridos")
    
    result = await service.process_message(data.mensaje, data.telefono)
    return {
        "success": result.outcome != IntakeOutcome.ERRORED,
        "message": {
            IntakeOutcome.CREATED: "Pedido procesado exitosamente",
            IntakeOutcome.IGNORED: "Mensaje no es un pedido válido",
            IntakeOutcome.ERRORED: "Error al procesar el pedido",
        }[result.outcome],
        "data": result.to_dict(),
    }


@whatsapp_router.get("/info", response_model=InfoResponse)
async def channel_info(settings: Settings = Depends(get_settings)):
    """Configured phone number and onboarding instructions"""
    return InfoResponse(
        configurado=settings.whatsapp_configured,
        phoneNumberId=settings.WHATSAPP_PHONE_NUMBER_ID or "No configurado",
        instrucciones=InfoInstructions(
            numero=settings.WHATSAPP_DISPLAY_NUMBER or "No configurado",
            mensaje=(
                "Envía un mensaje desde tu WhatsApp personal al número configurado. "
                "El sistema procesará automáticamente tu pedido."
            ),
        ),
    )
