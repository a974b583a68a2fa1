from zone_trust.domain.confidence import ConfidenceFactors, ZoneConfidenceState
from zone_trust.domain.intel import IntelSubmission
from zone_trust.domain.recommendation import RecommendationContext, ZoneRecommendation
from zone_trust.domain.zone import Zone

__all__ = [
    "ConfidenceFactors",
    "IntelSubmission",
    "RecommendationContext",
    "Zone",
    "ZoneConfidenceState",
    "ZoneRecommendation",
]
