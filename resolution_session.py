"""
Resolution sessions.

A session lives from the moment the spec chooser opens until the purchase
is confirmed or the chooser closes:

    Closed -> Open(preselection or empty) -> [value toggled] -> Open -> Confirmed/Closed

The mode (structured variants vs. legacy flat specs) is decided once in
open_resolution() and carried by the session type. Every derived value is
recomputed from the immutable product snapshot on each access.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union
from models import (
    ConfirmationPayload, InvalidSelectionError, LegacyDimensionView, ModeMismatchError,
    ProductSnapshot, PurchaseStatus, ResolutionMode, SessionClosedError, SessionState,
    SessionView, Variant,
)
from variant_normalizer import normalize_variants
from selection_matcher import selection_matcher
from selectability import selectability_evaluator
from display_resolver import display_resolver
from summary_builder import summary_builder
import legacy_fallback


logger = logging.getLogger(__name__)


class ResolutionSession(ABC):
    """State shared by both modes: lifecycle and chosen quantity"""

    mode: ResolutionMode

    def __init__(self, product: ProductSnapshot):
        self.product = product
        self.state = SessionState.OPEN
        self.quantity = 1

    def _ensure_open(self) -> None:
        if self.state != SessionState.OPEN:
            raise SessionClosedError(f"Session is {self.state.value.lower()}")

    # Mode-specific operations; the other mode's session rejects them
    def select_value(self, dimension_id: int, value_id: int) -> None:
        raise ModeMismatchError("Structured selection on a legacy session")

    def deselect_value(self, dimension_id: int) -> None:
        raise ModeMismatchError("Structured selection on a legacy session")

    def toggle_value(self, dimension_id: int, value_id: int) -> None:
        raise ModeMismatchError("Structured selection on a legacy session")

    def is_selectable(self, dimension_id: int, value_id: int) -> bool:
        raise ModeMismatchError("Selectability applies to structured sessions only")

    def select_legacy_value(self, name: str, value: str) -> None:
        raise ModeMismatchError("Legacy selection on a structured session")

    def deselect_legacy_value(self, name: str) -> None:
        raise ModeMismatchError("Legacy selection on a structured session")

    def toggle_legacy_value(self, name: str, value: str) -> None:
        raise ModeMismatchError("Legacy selection on a structured session")

    @property
    @abstractmethod
    def display_stock(self) -> int:
        ...

    @property
    @abstractmethod
    def all_selected(self) -> bool:
        ...

    @property
    @abstractmethod
    def can_buy(self) -> bool:
        ...

    @property
    def max_quantity(self) -> int:
        return display_resolver.max_quantity(self.display_stock, self.product.max_purchase)

    def set_quantity(self, quantity: int) -> int:
        """Clamp quantity into [1, max_quantity] (1 when nothing is purchasable)"""
        self._ensure_open()
        upper = max(1, self.max_quantity)
        self.quantity = min(max(quantity, 1), upper)
        return self.quantity

    def increase_quantity(self) -> int:
        return self.set_quantity(self.quantity + 1)

    def decrease_quantity(self) -> int:
        return self.set_quantity(self.quantity - 1)

    @property
    def purchase_status(self) -> PurchaseStatus:
        if self.display_stock == 0:
            return PurchaseStatus.OUT_OF_STOCK
        if not self.all_selected:
            return PurchaseStatus.SELECT_SPECS
        return PurchaseStatus.READY

    @abstractmethod
    def _payload(self) -> ConfirmationPayload:
        ...

    @abstractmethod
    def view(self) -> SessionView:
        ...

    def confirm(self) -> ConfirmationPayload:
        """
        Emit the order payload and end the session. Whether the purchase is
        allowed (can_buy) is checked by the caller, not here.
        """
        self._ensure_open()
        payload = self._payload()
        self.state = SessionState.CONFIRMED
        logger.info(
            "Resolution confirmed (mode=%s, variant=%s, quantity=%s)",
            self.mode.value, payload.variant_id, payload.quantity,
        )
        return payload

    def close(self) -> None:
        if self.state == SessionState.OPEN:
            self.state = SessionState.CLOSED


class StructuredSession(ResolutionSession):
    """Session over structured dimensions and SKU variants"""

    mode = ResolutionMode.STRUCTURED

    def __init__(self, product: ProductSnapshot, pre_selection: Optional[Dict[int, int]] = None):
        super().__init__(product)
        self.dimensions = product.dimensions
        self.variants: List[Variant] = normalize_variants(product.variants)
        self.selection: Dict[int, int] = {}

        for dimension_id, value_id in (pre_selection or {}).items():
            try:
                self._validate(dimension_id, value_id)
            except InvalidSelectionError as e:
                logger.warning("Dropping preselection entry %s=%s: %s", dimension_id, value_id, e)
                continue
            self.selection[dimension_id] = value_id

    def _validate(self, dimension_id: int, value_id: int) -> None:
        for dimension in self.dimensions:
            if dimension.id == dimension_id:
                if dimension.find_value(value_id) is None:
                    raise InvalidSelectionError(
                        f"Dimension {dimension_id} has no value {value_id}"
                    )
                return
        raise InvalidSelectionError(f"Unknown dimension {dimension_id}")

    def select_value(self, dimension_id: int, value_id: int) -> None:
        self._ensure_open()
        self._validate(dimension_id, value_id)
        self.selection[dimension_id] = value_id
        self.quantity = 1

    def deselect_value(self, dimension_id: int) -> None:
        self._ensure_open()
        if self.selection.pop(dimension_id, None) is not None:
            self.quantity = 1

    def toggle_value(self, dimension_id: int, value_id: int) -> None:
        if self.selection.get(dimension_id) == value_id:
            self.deselect_value(dimension_id)
        else:
            self.select_value(dimension_id, value_id)

    def is_selectable(self, dimension_id: int, value_id: int) -> bool:
        return selectability_evaluator.is_selectable(
            self.dimensions, self.variants, self.selection, dimension_id, value_id
        )

    @property
    def matched_variant(self) -> Optional[Variant]:
        return selection_matcher.find_match(self.dimensions, self.variants, self.selection)

    @property
    def display_stock(self) -> int:
        return display_resolver.resolve_display_stock(True, self.matched_variant, self.product.stock)

    @property
    def all_selected(self) -> bool:
        return selection_matcher.all_dimensions_selected(self.dimensions, self.selection)

    @property
    def can_buy(self) -> bool:
        matched = self.matched_variant
        return self.all_selected and matched is not None and matched.stock > 0

    @property
    def purchase_status(self) -> PurchaseStatus:
        status = super().purchase_status
        if status == PurchaseStatus.READY and self.matched_variant is None:
            return PurchaseStatus.SPEC_UNAVAILABLE
        return status

    def _payload(self) -> ConfirmationPayload:
        matched = self.matched_variant
        return ConfirmationPayload(
            quantity=self.quantity,
            spec_summary_map=summary_builder.build_summary_map(self.dimensions, self.selection),
            variant_id=matched.id if matched is not None else None,
        )

    def view(self) -> SessionView:
        product = self.product
        matched = self.matched_variant
        price = display_resolver.resolve_display_price(True, matched, product.price_range, product.price)
        score_price = display_resolver.resolve_display_score_price(True, matched, self.variants, product.score_price)
        return SessionView(
            mode=self.mode,
            state=self.state,
            selection=dict(self.selection),
            matched_variant_id=matched.id if matched is not None else None,
            price=price,
            score_price=score_price,
            green_power_amount=product.green_power_amount,
            balance_amount=product.balance_amount,
            is_free=display_resolver.is_free(price, score_price, product.green_power_amount, product.balance_amount),
            stock=self.display_stock,
            image=display_resolver.resolve_display_image(
                True, matched, self.dimensions, self.selection, product.image
            ),
            summary_text=summary_builder.build_summary_text(matched, self.dimensions, self.selection),
            summary_map=summary_builder.build_summary_map(self.dimensions, self.selection),
            quantity=self.quantity,
            max_quantity=self.max_quantity,
            all_selected=self.all_selected,
            can_buy=self.can_buy,
            purchase_status=self.purchase_status,
            dimensions=selectability_evaluator.build_dimension_views(
                self.dimensions, self.variants, self.selection
            ),
            thumbnails=selectability_evaluator.build_thumbnails(self.dimensions, self.variants),
        )


class LegacySession(ResolutionSession):
    """Session over flat name/value specs with a single product stock"""

    mode = ResolutionMode.LEGACY

    def __init__(self, product: ProductSnapshot, pre_selection: Optional[Dict[str, str]] = None):
        super().__init__(product)
        self.specs = product.legacy_specs
        self.selection: Dict[str, str] = {}

        for name, value in (pre_selection or {}).items():
            try:
                self.selection = legacy_fallback.select_legacy_value(self.specs, self.selection, name, value)
            except InvalidSelectionError as e:
                logger.warning("Dropping legacy preselection entry %s=%s: %s", name, value, e)

    def select_legacy_value(self, name: str, value: str) -> None:
        self._ensure_open()
        self.selection = legacy_fallback.select_legacy_value(self.specs, self.selection, name, value)

    def deselect_legacy_value(self, name: str) -> None:
        self._ensure_open()
        self.selection.pop(name, None)

    def toggle_legacy_value(self, name: str, value: str) -> None:
        if self.selection.get(name) == value:
            self.deselect_legacy_value(name)
        else:
            self.select_legacy_value(name, value)

    @property
    def display_stock(self) -> int:
        return display_resolver.resolve_display_stock(False, None, self.product.stock)

    @property
    def all_selected(self) -> bool:
        return legacy_fallback.all_legacy_selected(self.specs, self.selection)

    @property
    def can_buy(self) -> bool:
        return legacy_fallback.can_purchase_legacy(self.specs, self.selection, self.product.stock)

    def _payload(self) -> ConfirmationPayload:
        return ConfirmationPayload(
            quantity=self.quantity,
            spec_summary_map=legacy_fallback.legacy_summary_map(self.specs, self.selection),
        )

    def view(self) -> SessionView:
        product = self.product
        price = display_resolver.resolve_display_price(False, None, None, product.price)
        score_price = display_resolver.resolve_display_score_price(False, None, [], product.score_price)
        return SessionView(
            mode=self.mode,
            state=self.state,
            legacy_selection=dict(self.selection),
            price=price,
            score_price=score_price,
            green_power_amount=product.green_power_amount,
            balance_amount=product.balance_amount,
            is_free=display_resolver.is_free(price, score_price, product.green_power_amount, product.balance_amount),
            stock=self.display_stock,
            image=product.image,
            summary_text=legacy_fallback.legacy_summary_text(self.specs, self.selection),
            summary_map=legacy_fallback.legacy_summary_map(self.specs, self.selection),
            quantity=self.quantity,
            max_quantity=self.max_quantity,
            all_selected=self.all_selected,
            can_buy=self.can_buy,
            purchase_status=self.purchase_status,
            legacy_dimensions=[
                LegacyDimensionView(name=spec.name, values=spec.values, selected=self.selection.get(spec.name))
                for spec in self.specs
            ],
        )


def uses_structured_mode(product: ProductSnapshot) -> bool:
    """Structured data presence decides; the has_structured_variants flag is advisory"""
    return bool(product.dimensions) and bool(product.variants)


def open_resolution(
    product: ProductSnapshot,
    pre_selection: Optional[Dict[int, int]] = None,
    legacy_pre_selection: Optional[Dict[str, str]] = None,
) -> Union[StructuredSession, LegacySession]:
    """
    Open a resolution session for a product.

    The preselection (e.g. a variant implied by the detail page) is passed
    in explicitly; entries that do not fit the product are dropped.
    """
    structured = uses_structured_mode(product)
    if product.has_structured_variants and not structured:
        logger.warning("has_structured_variants is set but dimensions or variants are empty; using legacy mode")
    elif structured and not product.has_structured_variants:
        logger.debug("Structured data present without has_structured_variants flag")

    if structured:
        if legacy_pre_selection:
            logger.warning("Ignoring legacy preselection for structured product")
        session = StructuredSession(product, pre_selection)
    else:
        if pre_selection:
            logger.warning("Ignoring structured preselection for legacy product")
        session = LegacySession(product, legacy_pre_selection)

    logger.info("Opened %s resolution session for %s", session.mode.value.lower(), product.name or "product")
    return session
