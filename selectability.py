"""
Selectability evaluation for value chips.

A (dimension, value) pair is selectable when picking it, while keeping the
current choices in the other dimensions, still leaves at least one in-stock
variant reachable. Unselected dimensions impose no constraint.
"""

from typing import Dict, List
from models import DimensionView, SpecDimension, ThumbnailOption, ValueChip, Variant
from variant_normalizer import parse_variant_key
from display_resolver import display_resolver


class SelectabilityEvaluator:
    """Drives the enabled/disabled state of every value chip"""

    def supports(self, dimensions: List[SpecDimension], variant: Variant, selection: Dict[int, int]) -> bool:
        """True when the variant agrees with every selected dimension"""
        value_ids = parse_variant_key(variant)
        for index, dimension in enumerate(dimensions):
            selected_id = selection.get(dimension.id)
            if selected_id is None:
                continue
            if index >= len(value_ids) or value_ids[index] != selected_id:
                return False
        return True

    def is_selectable(
        self,
        dimensions: List[SpecDimension],
        variants: List[Variant],
        selection: Dict[int, int],
        dimension_id: int,
        value_id: int,
    ) -> bool:
        """
        Check whether choosing value_id in dimension_id keeps an in-stock
        variant reachable. Unknown dimension ids are never selectable.
        """
        if not any(dimension.id == dimension_id for dimension in dimensions):
            return False

        # Overwrite only the target; other dimensions keep their current value
        hypothetical = dict(selection)
        hypothetical[dimension_id] = value_id

        return any(
            variant.stock > 0 and self.supports(dimensions, variant, hypothetical)
            for variant in variants
        )

    def uses_grid_mode(self, dimension: SpecDimension, dimension_index: int, variants: List[Variant]) -> bool:
        """Image grid for dimensions with value images (variant images count for the first)"""
        if any(value.image for value in dimension.values):
            return True
        return dimension_index == 0 and any(variant.image for variant in variants)

    def build_dimension_views(
        self,
        dimensions: List[SpecDimension],
        variants: List[Variant],
        selection: Dict[int, int],
    ) -> List[DimensionView]:
        views = []
        for index, dimension in enumerate(dimensions):
            grid_mode = self.uses_grid_mode(dimension, index, variants)
            chips = []
            for value in dimension.values:
                hint = None
                if grid_mode:
                    hint = display_resolver.value_hint(variants, dimension, index, value.id)
                chips.append(ValueChip(
                    value_id=value.id,
                    label=value.value,
                    selected=selection.get(dimension.id) == value.id,
                    selectable=self.is_selectable(dimensions, variants, selection, dimension.id, value.id),
                    hint=hint,
                ))
            views.append(DimensionView(
                dimension_id=dimension.id,
                name=dimension.name,
                grid_mode=grid_mode,
                chips=chips,
            ))
        return views

    def build_thumbnails(self, dimensions: List[SpecDimension], variants: List[Variant]) -> List[ThumbnailOption]:
        """
        Thumbnail strip: variants that carry an image; failing that, the
        image-bearing values of the first dimension; otherwise nothing.
        """
        with_images = [variant for variant in variants if variant.image]
        if with_images:
            thumbnails = []
            for variant in with_images:
                value_ids = parse_variant_key(variant)
                implied = {
                    dimension.id: value_ids[index]
                    for index, dimension in enumerate(dimensions)
                    if index < len(value_ids) and value_ids[index] is not None
                }
                thumbnails.append(ThumbnailOption(
                    variant_id=variant.id,
                    label=variant.variant_label or "",
                    image=variant.image,
                    available=variant.stock > 0,
                    selection=implied,
                ))
            return thumbnails

        if not dimensions:
            return []

        first = dimensions[0]
        thumbnails = []
        for value in first.values:
            if not value.image:
                continue
            available = any(
                variant.stock > 0 and parse_variant_key(variant)[:1] == [value.id]
                for variant in variants
            )
            thumbnails.append(ThumbnailOption(
                label=value.value,
                image=value.image,
                available=available,
                selection={first.id: value.id},
            ))
        return thumbnails


# Global selectability evaluator instance
selectability_evaluator = SelectabilityEvaluator()
