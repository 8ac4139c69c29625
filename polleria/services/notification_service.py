"""
Notification Service - customer and staff WhatsApp messages
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from polleria.core.exceptions import NotificationFailure
from polleria.integrations.whatsapp import WhatsAppCloudClient
from polleria.schemas.intake import PaymentMethod
from .product_resolver import ResolvedLineItem

logger = logging.getLogger(__name__)

CLARIFICATION_MESSAGE = (
    'Hola! 👋 Para hacer un pedido, por favor menciona los productos que deseas. '
    'Por ejemplo: "Quiero 2 pollos fritos"'
)

APOLOGY_MESSAGE = (
    "Lo sentimos, hubo un error al procesar tu pedido. "
    "Por favor, intenta de nuevo o contacta directamente."
)


def money(amount) -> str:
    return f"${Decimal(amount or 0):.2f}"


def format_quantity(quantity) -> str:
    """2 -> "2", 1.500 -> "1.5" (kilos)"""
    text = f"{Decimal(quantity):f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


class Notifier:
    """
    Best-effort sender: never raises, returns whether the message left
    """
    
    def __init__(self, client: WhatsAppCloudClient):
        self.client = client
    
    async def send(self, phone: str, text: str) -> bool:
        try:
            result = await self.client.send_text(phone, text)
        except NotificationFailure as e:
            logger.warning(f"Could not send WhatsApp message to {phone}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending WhatsApp message to {phone}: {e}")
            return False
        return result.delivered
    
    async def notify_staff(self, numbers: Iterable[str], text: str) -> int:
        """Send the same alert to every staff number, returns how many were delivered"""
        numbers = list(numbers)
        if not numbers:
            logger.warning("No staff numbers configured (WHATSAPP_STAFF_NUMBERS)")
            return 0
        
        delivered = 0
        for number in numbers:
            if await self.send(number, text):
                delivered += 1
        return delivered


# ========== Message builders ==========

def build_clarification_message() -> str:
    return CLARIFICATION_MESSAGE


def build_apology_message() -> str:
    return APOLOGY_MESSAGE


def _item_lines(items: List[ResolvedLineItem]) -> str:
    return "\n".join(f"• {item.name} x{format_quantity(item.quantity)} - {money(item.line_total)}" for item in items)


def build_confirmation_message(
    customer_name: str,
    order_number: str,
    items: List[ResolvedLineItem],
    total: Decimal,
    payment_method: Optional[PaymentMethod],
    delivery_address: Optional[str] = None,
    ask_name: bool = False,
    ask_address: bool = False,
    ask_payment: bool = False,
) -> str:
    """
    Order confirmation. Questions for a missing name, address or payment
    method are appended so the customer gets a single message.
    """
    payment = payment_method.label if payment_method else "No especificado"
    message = (
        f"✅ *Pedido Confirmado*\n\n"
        f"Hola {customer_name}!\n\n"
        f"Tu pedido #{order_number} ha sido registrado:\n\n"
        f"{_item_lines(items)}\n\n"
        f"*Total: {money(total)}*\n"
        f"💰 *Método de pago:* {payment}"
    )
    if delivery_address:
        message += f"\n📍 *Dirección:* {delivery_address}"
    message += "\n\n📢 *Tu pedido ha sido notificado a la tienda.*"
    
    questions = []
    if ask_name:
        questions.append("• ¿Cuál es tu nombre?")
    if ask_address:
        questions.append("• ¿Cuál es tu dirección de entrega?")
    if questions:
        message += "\n\n👋 ¡Veo que es tu primer pedido! Necesito algunos datos:\n" + "\n".join(questions)
    if ask_payment:
        message += "\n\n💰 Por favor, indica tu método de pago:\n• Efectivo\n• Tarjeta\n• Transferencia"
    if questions or ask_payment:
        message += "\n\nPuedes enviar esta información en tu siguiente mensaje."
    
    message += "\n\nTe contactaremos pronto para confirmar la entrega. ¡Gracias por tu preferencia! 🐔"
    return message


def build_staff_alert(
    order_number: str,
    customer_name: str,
    phone: str,
    items: List[ResolvedLineItem],
    total: Decimal,
    delivery_address: Optional[str] = None,
    notes: Optional[str] = None,
) -> str:
    message = "🔔 *NUEVO PEDIDO*\n\n"
    message += f"📋 *Pedido:* {order_number}\n"
    message += f"👤 *Cliente:* {customer_name}\n"
    message += f"📱 *WhatsApp:* {phone}\n"
    if delivery_address:
        message += f"📍 *Dirección:* {delivery_address}\n"
    message += f"💰 *Total:* {money(total)}\n\n"
    
    message += "*Productos:*\n"
    for index, item in enumerate(items, start=1):
        message += f"{index}. {item.name} x{format_quantity(item.quantity)}"
        if item.unit_price:
            message += f" - {money(item.unit_price)}"
        message += "\n"
    
    if notes:
        message += f"\n📝 *Notas:* {notes}"
    return message
