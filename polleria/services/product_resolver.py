"""
Product Resolver - map interpreted mentions onto catalog products
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from polleria.schemas.intake import CatalogEntry, ProductMention

logger = logging.getLogger(__name__)


@dataclass
class ResolvedLineItem:
    name: str
    quantity: Decimal
    unit_price: Decimal
    catalog_id: Optional[int] = None
    
    @property
    def resolved(self) -> bool:
        return self.catalog_id is not None
    
    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def _match_by_name(name: str, catalog: List[CatalogEntry]) -> Optional[CatalogEntry]:
    """First catalog entry whose name contains the mention, or is contained by it"""
    needle = name.strip().lower()
    if not needle:
        return None
    for entry in catalog:
        candidate = entry.name.strip().lower()
        if candidate and (needle in candidate or candidate in needle):
            return entry
    return None


def resolve_products(
    mentions: List[ProductMention],
    catalog: List[CatalogEntry],
) -> Tuple[List[ResolvedLineItem], List[str]]:
    """
    Resolve each mention, in order:
    1. explicit catalog id still present in the catalog
    2. case-insensitive substring match in either direction
    3. unresolved placeholder (catalog_id None, price 0) plus a diagnostic
    
    Always returns exactly one item per mention.
    """
    by_id = {entry.id: entry for entry in catalog}
    items: List[ResolvedLineItem] = []
    diagnostics: List[str] = []
    
    for mention in mentions:
        entry = by_id.get(mention.product_id) if mention.product_id is not None else None
        if entry is None:
            entry = _match_by_name(mention.name, catalog)
        
        if entry is not None:
            items.append(ResolvedLineItem(
                name=entry.name,
                quantity=mention.quantity,
                unit_price=Decimal(entry.price),
                catalog_id=entry.id,
            ))
            continue
        
        logger.warning(f"Product not found in catalog: {mention.name}")
        diagnostics.append(f"Producto no encontrado: {mention.name}")
        items.append(ResolvedLineItem(
            name=mention.name,
            quantity=mention.quantity,
            unit_price=Decimal("0"),
        ))
    
    return items, diagnostics


def items_total(items: List[ResolvedLineItem]) -> Decimal:
    return sum((item.line_total for item in items), Decimal("0"))
