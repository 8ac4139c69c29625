"""
Base Message Interpreter - turns free text into a structured order intent
"""
from abc import ABC, abstractmethod
from typing import List

from polleria.schemas.intake import CatalogEntry, OrderIntent


class BaseInterpreter(ABC):
    """
    Abstract natural-language order interpreter
    """
    NAME: str = "base"
    
    @abstractmethod
    async def interpret(self, text: str, phone: str, catalog: List[CatalogEntry]) -> OrderIntent:
        """
        Extract products, quantities, payment method, address, notes and customer name.
        
        Raises NotAnOrder when the text has no order-like content,
        InterpreterError for any other failure.
        """
        pass
