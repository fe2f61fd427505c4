from .trusted_pair_repository_interface import TrustedPairRepository
from .router_events_repository_interface import RouterEventsRepositoryInterface
from .funding_claims_repository_interface import FundingClaimsRepositoryInterface

__all__ = [
    "TrustedPairRepository",
    "RouterEventsRepositoryInterface",
    "FundingClaimsRepositoryInterface",
]
