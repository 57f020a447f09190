"""
Legacy single-dimension specs.

Products without structured variants expose flat name/value specs. The
selection maps a spec name straight to the chosen value string; there is
no per-combination stock or price, so nothing is ever disabled.
"""

from typing import Dict, List, Optional
from models import InvalidSelectionError, LegacySpec
from config import settings


def find_legacy_spec(specs: List[LegacySpec], name: str) -> Optional[LegacySpec]:
    for spec in specs:
        if spec.name == name:
            return spec
    return None


def select_legacy_value(specs: List[LegacySpec], selection: Dict[str, str], name: str, value: str) -> Dict[str, str]:
    """Return a new selection with name set to value"""
    spec = find_legacy_spec(specs, name)
    if spec is None:
        raise InvalidSelectionError(f"Unknown spec '{name}'")
    if value not in spec.values:
        raise InvalidSelectionError(f"Spec '{name}' has no value '{value}'")

    updated = dict(selection)
    updated[name] = value
    return updated


def all_legacy_selected(specs: List[LegacySpec], selection: Dict[str, str]) -> bool:
    return all(selection.get(spec.name) for spec in specs)


def can_purchase_legacy(specs: List[LegacySpec], selection: Dict[str, str], stock: int) -> bool:
    """Every spec chosen and the flat product stock positive"""
    return all_legacy_selected(specs, selection) and stock > 0


def legacy_summary_text(specs: List[LegacySpec], selection: Dict[str, str]) -> str:
    return settings.SUMMARY_SEPARATOR.join(
        selection[spec.name] for spec in specs if selection.get(spec.name)
    )


def legacy_summary_map(specs: List[LegacySpec], selection: Dict[str, str]) -> Optional[Dict[str, str]]:
    """Selected name -> value pairs; None when the product has no specs at all"""
    if not specs:
        return None
    return {spec.name: selection[spec.name] for spec in specs if selection.get(spec.name)}
