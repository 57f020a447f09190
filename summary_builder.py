"""
Human-readable spec summaries for the chooser header and order lines.
"""

from typing import Dict, List, Optional
from models import SpecDimension, Variant
from config import settings


class SummaryBuilder:

    def _selected_values(self, dimensions: List[SpecDimension], selection: Dict[int, int]):
        """(dimension, value) pairs for selected dimensions, in dimension order"""
        for dimension in dimensions:
            value_id = selection.get(dimension.id)
            if value_id is None:
                continue
            value = dimension.find_value(value_id)
            if value is not None:
                yield dimension, value

    def build_summary_text(
        self,
        matched: Optional[Variant],
        dimensions: List[SpecDimension],
        selection: Dict[int, int],
    ) -> str:
        """
        The matched variant's own label wins; otherwise the selected value
        labels joined in dimension order. Unselected dimensions are omitted.
        """
        if matched is not None and matched.variant_label:
            return matched.variant_label

        return settings.SUMMARY_SEPARATOR.join(
            value.value for _, value in self._selected_values(dimensions, selection)
        )

    def build_summary_map(self, dimensions: List[SpecDimension], selection: Dict[int, int]) -> Dict[str, str]:
        """Dimension name -> value label, for selected dimensions only"""
        return {
            dimension.name: value.value
            for dimension, value in self._selected_values(dimensions, selection)
        }


# Global summary builder instance
summary_builder = SummaryBuilder()
