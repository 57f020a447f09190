"""
Derived display values: price, score price, stock and image for the
current selection, plus per-value price hints for grid-style choosers.
"""

from typing import Dict, List, Optional
from models import AmountDisplay, PriceRange, SpecDimension, ValueHint, Variant
from variant_normalizer import parse_variant_key
from config import settings


def format_amount(amount: float) -> str:
    """
    Plain number rendering: 10.0 -> "10", 10.5 -> "10.5" (no currency).
    Text is rounded to 2 decimals; the exact value stays on amount/price_range.
    """
    return ("%.2f" % amount).rstrip("0").rstrip(".")


def format_range(low: float, high: float) -> str:
    if low == high:
        return format_amount(low)
    return f"{format_amount(low)}{settings.PRICE_RANGE_SEPARATOR}{format_amount(high)}"


def _exact(amount: float) -> AmountDisplay:
    return AmountDisplay(amount=amount, text=format_amount(amount))


def _ranged(low: float, high: float) -> AmountDisplay:
    return AmountDisplay(
        price_range=PriceRange(min=low, max=high),
        text=format_range(low, high),
    )


class DisplayResolver:
    """Computes what the presentation layer shows for a selection"""

    def resolve_display_price(
        self,
        structured: bool,
        matched: Optional[Variant],
        price_range: Optional[PriceRange],
        flat_price: float,
    ) -> AmountDisplay:
        """
        Display price fallback order:
        1. Exact price of the matched variant
        2. Catalog-wide price range (a single value when min == max)
        3. The product's flat price
        """
        if structured:
            if matched is not None:
                return _exact(matched.price)
            if price_range is not None:
                if price_range.min == price_range.max:
                    return _exact(price_range.min)
                return _ranged(price_range.min, price_range.max)
        return _exact(flat_price)

    def resolve_display_score_price(
        self,
        structured: bool,
        matched: Optional[Variant],
        variants: List[Variant],
        flat_score_price: float,
    ) -> AmountDisplay:
        """
        Secondary-currency price. Without a match, scans every variant
        (selection is ignored) for positive score prices.
        """
        if structured:
            if matched is not None:
                return _exact(matched.score_price or 0.0)

            score_prices = [v.score_price for v in variants if v.score_price and v.score_price > 0]
            if score_prices:
                low, high = min(score_prices), max(score_prices)
                if low != high:
                    return _ranged(low, high)
                return _exact(low)
        return _exact(flat_score_price)

    def resolve_display_stock(self, structured: bool, matched: Optional[Variant], flat_stock: int) -> int:
        if structured and matched is not None:
            return matched.stock
        return flat_stock

    def resolve_display_image(
        self,
        structured: bool,
        matched: Optional[Variant],
        dimensions: List[SpecDimension],
        selection: Dict[int, int],
        default_image: Optional[str],
    ) -> Optional[str]:
        """
        Image fallback chain: matched variant image, then the image of the
        first selected value (dimension order), then the product default.
        """
        if structured and matched is not None and matched.image:
            return matched.image

        if structured:
            for dimension in dimensions:
                value_id = selection.get(dimension.id)
                if value_id is None:
                    continue
                value = dimension.find_value(value_id)
                if value is not None and value.image:
                    return value.image

        return default_image

    def value_hint(
        self,
        variants: List[Variant],
        dimension: SpecDimension,
        dimension_index: int,
        value_id: int,
    ) -> ValueHint:
        """
        Price hint for one value: min/max over every variant carrying that
        value at the dimension's position, whatever the other dimensions hold.
        """
        related = []
        for variant in variants:
            value_ids = parse_variant_key(variant)
            if dimension_index < len(value_ids) and value_ids[dimension_index] == value_id:
                related.append(variant)

        if not related:
            return ValueHint()

        # A variant may be denominated in either currency; score price wins
        prices = [v.score_price or v.price or 0 for v in related]
        prices = [p for p in prices if p > 0]
        min_price = min(prices) if prices else None
        max_price = max(prices) if prices else None

        image = next((v.image for v in related if v.image), None)
        if image is None:
            value = dimension.find_value(value_id)
            image = value.image if value is not None else None

        is_score_price = any((v.score_price or 0) > 0 for v in related)

        text = ""
        if min_price is not None:
            text = format_range(min_price, max_price)
            if is_score_price:
                text = f"{text} {settings.SCORE_UNIT_LABEL}"

        return ValueHint(
            min_price=min_price,
            max_price=max_price,
            image=image,
            is_score_price=is_score_price,
            text=text,
        )

    def is_free(
        self,
        price: AmountDisplay,
        score_price: AmountDisplay,
        green_power_amount: float,
        balance_amount: float,
    ) -> bool:
        """True when the price line has no positive part to show"""
        def shown(display: AmountDisplay) -> bool:
            return display.price_range is not None or (display.amount or 0) > 0

        return not (
            shown(price)
            or shown(score_price)
            or green_power_amount > 0
            or balance_amount > 0
        )

    def max_quantity(self, display_stock: int, max_purchase: int) -> int:
        """Largest quantity the chooser allows"""
        return min(display_stock, max_purchase)


# Global display resolver instance
display_resolver = DisplayResolver()
