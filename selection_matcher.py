"""
Selection matching: resolves a complete per-dimension selection to the
in-stock variant whose key equals the selection tuple.
"""

import logging
from typing import Dict, List, Optional
from models import SpecDimension, Variant
from variant_normalizer import canonical_key
from config import settings


logger = logging.getLogger(__name__)


class SelectionMatcher:
    """Finds the concrete variant for a selection"""

    def all_dimensions_selected(self, dimensions: List[SpecDimension], selection: Dict[int, int]) -> bool:
        """True when every dimension has a chosen value"""
        return all(selection.get(dimension.id) is not None for dimension in dimensions)

    def target_key(self, dimensions: List[SpecDimension], selection: Dict[int, int]) -> str:
        """Selected value ids joined in dimension order (canonical key form)"""
        return settings.VARIANT_KEY_DELIMITER.join(
            str(selection[dimension.id]) for dimension in dimensions
        )

    def find_match(
        self,
        dimensions: List[SpecDimension],
        variants: List[Variant],
        selection: Dict[int, int],
    ) -> Optional[Variant]:
        """
        Return the variant matching the selection, or None.

        Rules:
        1. Partial selections never resolve (every dimension must be selected)
        2. The variant key must equal the selected ids in dimension order
        3. Zero-stock variants are treated as absent
        4. Duplicate in-stock keys are an upstream data error; first one wins
        """
        if not dimensions or not self.all_dimensions_selected(dimensions, selection):
            return None

        target = self.target_key(dimensions, selection)

        for variant in variants:
            if canonical_key(variant) == target and variant.stock > 0:
                return variant

        logger.debug("No in-stock variant for key %s", target)
        return None


# Global selection matcher instance
selection_matcher = SelectionMatcher()
