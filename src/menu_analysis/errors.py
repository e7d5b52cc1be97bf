"""
Error types raised by the menu analysis pipeline.

All of them are fatal for a run: the pipeline logs them and stops.
"""


class MenuAnalysisError(ValueError):
    """Base class for pipeline errors."""


class LoadError(MenuAnalysisError):
    """A source table is missing, malformed, or has a missing required field."""


class ReferentialIntegrityError(MenuAnalysisError):
    """Order lines reference menu items that do not exist."""

    def __init__(self, unknown_item_ids):
        self.unknown_item_ids = sorted(unknown_item_ids, key=str)
        shown = self.unknown_item_ids[:10]
        super().__init__(
            f"{len(self.unknown_item_ids)} order line item ids have no matching menu item: {shown}"
        )


class EmptyDatasetError(MenuAnalysisError):
    """A query needs at least one row but the table is empty."""
