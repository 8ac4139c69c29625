"""
Keyword Message Interpreter - offline fallback when no Gemini key is configured
"""
import logging
import re
import unicodedata
from typing import List, Optional

from polleria.core.exceptions import NotAnOrder
from polleria.schemas.intake import CatalogEntry, OrderIntent, PaymentMethod, ProductMention
from .base import BaseInterpreter

logger = logging.getLogger(__name__)

NUMBER_WORDS = {
    "un": 1, "una": 1, "uno": 1, "dos": 2, "tres": 3, "cuatro": 4, "cinco": 5,
    "seis": 6, "siete": 7, "ocho": 8, "nueve": 9, "diez": 10, "docena": 12,
}

# Tokens allowed between a quantity and the product name ("2 kg de pechuga")
FILLER_WORDS = ("kg", "kilo", "kilos", "de", "del", "orden", "ordenes", "pieza", "piezas", "bolsa", "bolsas")

ADDRESS_PATTERN = re.compile(
    r"(?:direcci[oó]n(?:\s+es)?|entregar\s+en|enviar\s+a|mandar\s+a|llevar\s+a)\s*:?\s*([^\n.]+)",
    re.IGNORECASE,
)
NAME_PATTERN = re.compile(
    r"(?:mi\s+nombre\s+es|me\s+llamo)\s+([A-Za-zÁÉÍÓÚÑáéíóúñ]+(?:\s+[A-Za-zÁÉÍÓÚÑáéíóúñ]+)?)",
    re.IGNORECASE,
)


def _strip_accents(text: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn")


def _fold(token: str) -> str:
    """Fold Spanish plurals so 'pollos fritos' matches 'Pollo Frito'"""
    if token.isdigit() or token in NUMBER_WORDS:
        return token
    if len(token) > 3 and token.endswith("s"):
        return token[:-1]
    return token


def tokenize(text: str) -> List[str]:
    return [_fold(t) for t in re.findall(r"[a-z0-9]+", _strip_accents(text.lower()))]


FOLDED_FILLERS = {_fold(w) for w in FILLER_WORDS}


class KeywordInterpreter(BaseInterpreter):
    """
    Matches catalog product names against the message words.
    
    Longer catalog names win over shorter ones sharing the same words,
    and every message word is consumed by at most one product.
    """
    NAME = "keyword"
    
    async def interpret(self, text: str, phone: str, catalog: List[CatalogEntry]) -> OrderIntent:
        tokens = tokenize(text)
        consumed = [False] * len(tokens)
        mentions: List[ProductMention] = []
        
        entries = sorted(catalog, key=lambda p: len(tokenize(p.name)), reverse=True)
        for entry in entries:
            name_tokens = tokenize(entry.name)
            if not name_tokens:
                continue
            start = self._find(tokens, consumed, name_tokens)
            if start is None:
                continue
            for i in range(start, start + len(name_tokens)):
                consumed[i] = True
            mentions.append(ProductMention(
                name=entry.name,
                quantity=self._quantity_before(tokens, start),
                product_id=entry.id,
            ))
        
        if not mentions:
            raise NotAnOrder("No se encontraron productos del catálogo en el mensaje")
        
        logger.info(f"[{self.NAME}] Matched {len(mentions)} products for {phone}")
        return OrderIntent(
            products=mentions,
            payment_method=PaymentMethod.from_text(text),
            delivery_address=self._search(ADDRESS_PATTERN, text),
            customer_name=self._customer_name(text),
        )
    
    @staticmethod
    def _find(tokens: List[str], consumed: List[bool], needle: List[str]) -> Optional[int]:
        n = len(needle)
        for i in range(len(tokens) - n + 1):
            if tokens[i:i + n] == needle and not any(consumed[i:i + n]):
                return i
        return None
    
    @staticmethod
    def _quantity_before(tokens: List[str], start: int) -> int:
        i = start - 1
        while i >= 0 and tokens[i] in FOLDED_FILLERS:
            i -= 1
        if i < 0:
            return 1
        word = tokens[i]
        if word.isdigit():
            return int(word) or 1
        return NUMBER_WORDS.get(word, 1)
    
    @staticmethod
    def _search(pattern: re.Pattern, text: str) -> Optional[str]:
        match = pattern.search(text)
        if not match:
            return None
        value = match.group(1).strip(" ,;:")
        return value or None
    
    def _customer_name(self, text: str) -> Optional[str]:
        name = self._search(NAME_PATTERN, text)
        return name.title() if name else None

