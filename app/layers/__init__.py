"""Processing layers for the intake-to-invoice pipeline."""

# Note: Import layers individually to avoid circular imports
# Use: from app.layers.layer1_intake import IntakeNavigator
# Use: from app.layers.layer2_budget import parse_budget
# Use: from app.layers.layer3_pricing import ProposalCalculator
# Use: from app.layers.layer4_line_items import generate_line_items
# Use: from app.layers.layer5_invoice import InvoiceService

__all__ = [
    "layer1_intake",
    "layer2_budget",
    "layer3_pricing",
    "layer4_line_items",
    "layer5_invoice",
]
