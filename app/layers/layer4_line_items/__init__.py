"""Layer 4: Line Items - Weighted budget allocation into invoice lines."""

from .line_item_generator import (
    generate_line_items,
    line_items_from_proposal,
    template_for,
    LINE_ITEM_TEMPLATES,
    DEFAULT_TEMPLATE,
)

__all__ = [
    "generate_line_items",
    "line_items_from_proposal",
    "template_for",
    "LINE_ITEM_TEMPLATES",
    "DEFAULT_TEMPLATE",
]
