"""Lead scoring and valuation."""

from bark_lead_decoder.scoring.scorer import LeadScorer

__all__ = ["LeadScorer"]
