"""
Variant key normalization.

Backends deliver a variant's key either as an ordered list of value ids
([1, 3]) or as a delimited string ("1,3"). Both are converted to the
canonical delimited string once, on ingestion, so nothing downstream
branches on the shape.
"""

from typing import List, Optional
from models import Variant
from config import settings


def _parse_id(token: str) -> Optional[int]:
    """Value id from a key token: optional leading '-' then ASCII digits only"""
    token = token.strip()
    digits = token[1:] if token.startswith("-") else token
    # int() also accepts "1_1" and non-ASCII digits; those keys are malformed
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(token)


def _canonical_tokens(raw: str) -> Optional[List[str]]:
    """Integer tokens of a delimited key, or None if any token is not an integer"""
    value_ids = [_parse_id(token) for token in raw.split(settings.VARIANT_KEY_DELIMITER)]
    if any(value_id is None for value_id in value_ids):
        return None
    return [str(value_id) for value_id in value_ids]


def canonical_key(variant: Variant) -> Optional[str]:
    """Canonical string form of a variant key (None when the key is absent)"""
    key = variant.variant_key
    if key is None:
        return None
    if isinstance(key, list):
        return settings.VARIANT_KEY_DELIMITER.join(str(value_id) for value_id in key)
    tokens = _canonical_tokens(key)
    if tokens is None:
        # Malformed keys pass through and simply never match
        return key
    return settings.VARIANT_KEY_DELIMITER.join(tokens)


def normalize_variant(variant: Variant) -> Variant:
    """Return the variant with its key in canonical string form."""
    key = canonical_key(variant)
    if key == variant.variant_key:
        return variant
    return variant.model_copy(update={"variant_key": key})


def normalize_variants(variants: List[Variant]) -> List[Variant]:
    return [normalize_variant(variant) for variant in variants]


def parse_variant_key(variant: Variant) -> List[Optional[int]]:
    """
    Positional value ids of a variant, one per dimension.
    Unparsable tokens come back as None so they never equal a selected id.
    """
    key = variant.variant_key
    if key is None:
        return []
    if isinstance(key, list):
        return list(key)
    if not key.strip():
        return []

    return [_parse_id(token) for token in key.split(settings.VARIANT_KEY_DELIMITER)]
