"""
Supplier price sync.

Re-reads the supplier cost of the least recently updated products and
reprices them with the current exchange rate and markup.
"""
import logging
import time
from typing import List

from apps.siteconfig.services import get_pricing_config
from apps.supplier.client import get_client
from apps.supplier.exceptions import SupplierError

from .dtos import PriceChangeDTO, PriceSyncErrorDTO, PriceSyncResultDTO
from .models import CuratedProduct
from .pricing import SIGNIFICANT_CHANGE_PERCENT, percent_change, retail_price

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def sync_product_prices(limit: int = DEFAULT_LIMIT, sync_type: str = 'scheduled') -> PriceSyncResultDTO:
    """
    Reprice up to `limit` active products.

    A changed supplier cost rewrites cj_cost_price, suggested_price and
    custom_price; changes above 0.5% are reported. Non-positive supplier
    prices and supplier errors are recorded per product.
    """
    started = time.monotonic()
    logger.info("Starting %s price sync (limit=%s)", sync_type, limit)

    products = list(
        CuratedProduct.objects.filter(is_active=True)
        .exclude(cj_pid='')
        .order_by('updated_at')[:limit]
    )
    if not products:
        logger.info("No products to price-sync")
        return PriceSyncResultDTO(synced=0, processed=0)

    pricing = get_pricing_config()
    client = get_client()
    changes: List[PriceChangeDTO] = []
    errors: List[PriceSyncErrorDTO] = []
    synced = 0

    for product in products:
        try:
            current_cost = client.get_product_details(product.cj_pid).price
        except SupplierError as e:
            logger.error("Price sync failed for %s: %s", product.cj_pid, e)
            errors.append(PriceSyncErrorDTO(product_id=product.id, name=product.product_name, reason=str(e)))
            continue

        if current_cost <= 0:
            errors.append(PriceSyncErrorDTO(
                product_id=product.id, name=product.product_name, reason='Invalid supplier price',
            ))
            continue

        stored_cost = product.cj_cost_price
        if current_cost == stored_cost:
            continue

        change = percent_change(stored_cost, current_cost, places=None)
        old_price = product.custom_price
        new_price = retail_price(current_cost, pricing.usd_to_zar, pricing.price_markup)

        product.cj_cost_price = current_cost
        product.suggested_price = new_price
        product.custom_price = new_price
        product.save(update_fields=['cj_cost_price', 'suggested_price', 'custom_price', 'updated_at'])
        synced += 1

        if change > SIGNIFICANT_CHANGE_PERCENT:
            changes.append(PriceChangeDTO(
                product_id=product.id,
                name=product.product_name,
                old_cost_usd=stored_cost,
                new_cost_usd=current_cost,
                old_price_zar=old_price,
                new_price_zar=new_price,
                percent_change=percent_change(stored_cost, current_cost),
                increased=current_cost > stored_cost,
            ))

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Price sync finished: %d repriced, %d significant changes, %d errors in %dms",
        synced, len(changes), len(errors), elapsed_ms,
    )
    for c in changes[:5]:
        logger.info(
            "  %s: $%s -> $%s (%s%s%%)",
            c.name, c.old_cost_usd, c.new_cost_usd, '+' if c.increased else '-', c.percent_change,
        )
    if errors:
        logger.warning("Price sync errors: %s", [e.reason for e in errors[:3]])

    return PriceSyncResultDTO(
        synced=synced,
        processed=len(products),
        changes=changes,
        errors=errors,
        elapsed_ms=elapsed_ms,
    )
