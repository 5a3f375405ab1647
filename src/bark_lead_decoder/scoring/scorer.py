#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Lead Scorer & Valuator

Scores leads on a 0-100 scale for sales triage and estimates their monetary
value in the locale currency. The score is additive and tiered so every
contribution can be read off on its own; the value is multiplicative.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from bark_lead_decoder.locales import Locale, US_LOCALE
from bark_lead_decoder.models.lead import ExtractedLead

logger = logging.getLogger(__name__)

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# (threshold, points), highest tier first; only the first tier passed counts
RATING_TIERS = ((4.5, 25), (4.0, 20), (3.5, 15), (3.0, 10))
REVIEW_TIERS = ((50, 20), (20, 15), (10, 10), (5, 5))
SERVICE_TIERS = ((5, 10), (2, 5))

VERIFIED_POINTS = 10
PHONE_POINTS = 8
EMAIL_POINTS = 7
FAST_RESPONSE_POINTS = 10
DAY_RESPONSE_POINTS = 5
HIGH_VALUE_CATEGORY_POINTS = 10

HIGH_QUALITY_MULTIPLIER = 1.3
GOOD_QUALITY_MULTIPLIER = 1.15
VERIFIED_MULTIPLIER = 1.1


def _tier_points(value: float, tiers) -> int:
    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


class LeadScorer:
    """Computes lead scores and value estimates for a locale."""

    def __init__(self, locale: Locale = US_LOCALE):
        self.locale = locale

    def score_breakdown(self, lead: ExtractedLead) -> Dict[str, int]:
        """
        Points contributed by each signal, before clamping.

        Args:
            lead: Lead to score

        Returns:
            Dict mapping signal name to points
        """
        response_time = (lead.response_time or "").lower()
        if "hour" in response_time or "minute" in response_time:
            response_points = FAST_RESPONSE_POINTS
        elif "day" in response_time:
            response_points = DAY_RESPONSE_POINTS
        else:
            response_points = 0

        category = lead.category.lower()
        high_value = any(keyword in category for keyword in self.locale.high_value_categories)

        return {
            "base": BASE_SCORE,
            "rating": _tier_points(lead.rating, RATING_TIERS),
            "reviews": _tier_points(lead.review_count, REVIEW_TIERS),
            "verified": VERIFIED_POINTS if lead.is_verified else 0,
            "phone": PHONE_POINTS if lead.phones.primary else 0,
            "email": EMAIL_POINTS if lead.email else 0,
            "response_time": response_points,
            "services": _tier_points(len(lead.services), SERVICE_TIERS),
            "category": HIGH_VALUE_CATEGORY_POINTS if high_value else 0,
        }

    def score(self, lead: ExtractedLead) -> int:
        """Lead score clamped to [0, 100]."""
        total = sum(self.score_breakdown(lead).values())
        return max(MIN_SCORE, min(MAX_SCORE, total))

    def category_multiplier(self, category: Optional[str]) -> float:
        """First matching keyword in the locale's priority table, else 1.0."""
        lowered = (category or "").lower()
        for keyword, multiplier in self.locale.category_multipliers:
            if keyword in lowered:
                return multiplier
        return 1.0

    def estimate_amount(self, lead: ExtractedLead) -> int:
        """Estimated lead value as a whole number of currency units."""
        multiplier = self.category_multiplier(lead.category)

        if lead.rating > 4.5 and lead.review_count > 20:
            multiplier *= HIGH_QUALITY_MULTIPLIER
        elif lead.rating > 4.0 and lead.review_count > 10:
            multiplier *= GOOD_QUALITY_MULTIPLIER

        if lead.is_verified:
            multiplier *= VERIFIED_MULTIPLIER

        value = Decimal(str(self.locale.base_value * multiplier))
        return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def estimate_value(self, lead: ExtractedLead) -> str:
        """Estimated lead value formatted in the locale currency, e.g. $2,145."""
        return self.locale.format_currency(self.estimate_amount(lead))

    def enrich(self, lead: ExtractedLead) -> ExtractedLead:
        """Return a copy of the lead carrying its score and estimated value."""
        return lead.model_copy(
            update={
                "lead_score": self.score(lead),
                "estimated_value": self.estimate_value(lead),
            }
        )
