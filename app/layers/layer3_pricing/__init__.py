"""Layer 3: Pricing - Tier, add-on and maintenance plan proposal pricing."""

from .catalog import PricingCatalog, get_pricing_catalog
from .pricing_calculator import ProposalCalculator
from .proposal_service import ProposalService

__all__ = [
    "PricingCatalog",
    "get_pricing_catalog",
    "ProposalCalculator",
    "ProposalService",
]
