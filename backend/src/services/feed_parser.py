"""
Parsing of Shopify-style ``products.json`` entries into catalog values.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from backend.src.core.logging import get_logger
from backend.src.models.catalog import ProductData, ProductVariant

logger = get_logger(__name__)


# Upper bound of the BIGINT columns holding external IDs
MAX_EXTERNAL_ID = 2**63 - 1


def parse_external_id(value: Any) -> Optional[int]:
    """
    Read a Shopify numeric ID.

    Accepts positive integers and strings of ASCII digits (surrounding
    whitespace ignored) that fit a signed 64-bit column. Zero, negatives,
    booleans, blanks and anything else yield None.
    """
    if isinstance(value, bool):
        return None

    parsed: Optional[int] = None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float) and value.is_integer():
        parsed = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if stripped.isascii() and stripped.isdigit():
            parsed = int(stripped)

    if parsed is None or not 0 < parsed <= MAX_EXTERNAL_ID:
        return None
    return parsed


def parse_price(value: Any, variant_id: Optional[int] = None) -> Decimal:
    """
    Parse a variant price, falling back to zero.

    Unparsable, non-finite and negative prices are logged and read as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")

    raw = str(value).strip()
    try:
        price = Decimal(raw)
    except InvalidOperation:
        logger.warning(
            "Invalid price format for variant",
            extra={"variant_id": variant_id, "price": raw},
        )
        return Decimal("0")

    if not price.is_finite() or price < 0:
        logger.warning(
            "Invalid price format for variant",
            extra={"variant_id": variant_id, "price": raw},
        )
        return Decimal("0")

    return price


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _is_available(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def extract_variants(variants_node: Any) -> List[ProductVariant]:
    """Parse the ``variants`` array; a missing or non-array value yields []."""
    variants: List[ProductVariant] = []

    if not isinstance(variants_node, list):
        return variants

    for variant_node in variants_node:
        if not isinstance(variant_node, dict):
            logger.debug("Skipping malformed variant", extra={"variant": repr(variant_node)[:100]})
            continue

        variant_id = parse_external_id(variant_node.get("id"))
        variants.append(
            ProductVariant(
                shopify_variant_id=variant_id,
                title=_optional_text(variant_node.get("title")),
                price=parse_price(variant_node.get("price"), variant_id),
                sku=_optional_text(variant_node.get("sku")),
                available=_is_available(variant_node.get("available")),
            )
        )

    return variants


def parse_feed_product(product_node: Any) -> Optional[ProductData]:
    """
    Build a product value from one feed entry.

    Args:
        product_node: Decoded JSON object from the ``products`` array

    Returns:
        ProductData without an internal ID, or None when the entry is missing
        its ID, title or handle
    """
    if not isinstance(product_node, dict):
        logger.warning("Skipping feed entry that is not an object")
        return None

    shopify_product_id = parse_external_id(product_node.get("id"))
    title = product_node.get("title")
    handle = product_node.get("handle")
    title = title.strip() if isinstance(title, str) else None
    handle = handle.strip() if isinstance(handle, str) else None

    if shopify_product_id is None or not title or not handle:
        logger.warning(
            "Skipping product with missing id, title or handle",
            extra={"shopify_product_id": shopify_product_id},
        )
        return None

    variants = extract_variants(product_node.get("variants"))
    min_price = min((v.price for v in variants), default=Decimal("0"))

    try:
        return ProductData(
            shopify_product_id=shopify_product_id,
            title=title,
            handle=handle,
            price=min_price,
            product_type=_optional_text(product_node.get("product_type")),
            variants=variants,
        )
    except PydanticValidationError as e:
        logger.warning(
            "Skipping product that failed validation",
            extra={"shopify_product_id": shopify_product_id, "error": str(e)},
        )
        return None


def extract_product_nodes(document: Any) -> Optional[List[Dict[str, Any]]]:
    """Return the ``products`` array of a feed document, or None if absent."""
    if not isinstance(document, dict):
        return None
    products = document.get("products")
    return products if isinstance(products, list) else None
