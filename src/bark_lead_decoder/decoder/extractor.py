#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Field Extractor

Turns one provider card fragment into an ExtractedLead. Every field has an
ordered list of rules, most explicit first: ``data-testid`` selectors, then
class-substring selectors, then keyword regexes over the raw markup. The first
rule producing a usable value wins; when all rules miss, the field falls back
to its default. Extraction is pure and never raises.

Ratings outside 0-5 are treated as a miss, and text inside review-count
elements is never read as a rating. Verification is a plain substring check
for "verified" or "badge" anywhere in the card, so "Unverified" also counts
as verified.
"""

import html as html_lib
import logging
import re
from typing import Callable, List, Optional, Sequence, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from bark_lead_decoder.decoder.names import resolve_name
from bark_lead_decoder.decoder.phones import PhoneExtractor
from bark_lead_decoder.locales import BUSINESS_PLACEHOLDER, Locale, US_LOCALE
from bark_lead_decoder.models.lead import (
    ExtractedLead,
    PersonName,
    ProviderCardFragment,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FIRST_NAME_SELECTORS = ['[data-testid="first-name"]', '[class*="first-name"]']
LAST_NAME_SELECTORS = ['[data-testid="last-name"]', '[class*="last-name"]']
FULL_NAME_SELECTORS = [
    '[data-testid="provider-name"]',
    '[class*="provider-name"]',
    '[class*="pro-name"]',
    '[class*="contact-name"]',
    '[class*="owner-name"]',
    'h1[class*="name"], h2[class*="name"], h3[class*="name"], '
    'h4[class*="name"], h5[class*="name"], h6[class*="name"]',
]
BUSINESS_SELECTORS = [
    '[data-testid="business-name"]',
    '[class*="business-name"]',
    '[class*="company-name"]',
    '[class*="business-title"]',
    'h1[class*="business"], h2[class*="business"], h3[class*="business"], '
    'h4[class*="business"], h5[class*="business"], h6[class*="business"]',
]
EMAIL_SELECTORS = ['[data-testid="email"]', '[class*="email"]']
LOCATION_SELECTORS = [
    '[data-testid="location"]',
    '[class*="location"]',
    '[class*="service-area"]',
]
CATEGORY_SELECTORS = [
    '[data-testid="category"]',
    '[class*="service-category"]',
    '[class*="business-type"]',
    '[class*="pro-category"]',
    '[class*="category-tag"]',
]
RATING_SELECTORS = [
    '[data-testid="rating"]',
    '[class*="rating-score"]',
    '[class*="review-rating"]',
    '[class*="pro-rating"]',
    '[class*="stars"]',
    '[class*="rating"]',
]
REVIEW_COUNT_SELECTORS = [
    '[data-testid="review-count"]',
    '[class*="review-count"]',
    '[class*="reviews-number"]',
    '[class*="total-reviews"]',
]
DESCRIPTION_SELECTORS = [
    '[data-testid="description"]',
    '[class*="service-description"]',
    '[class*="provider-description"]',
    '[class*="about-text"]',
    '[class*="pro-bio"]',
    '[class*="description"]',
]
RESPONSE_TIME_SELECTORS = [
    '[data-testid="response-time"]',
    '[class*="response-time"]',
    '[class*="avg-response"]',
    '[class*="reply-time"]',
]
JOINED_DATE_SELECTORS = [
    '[data-testid="joined-date"]',
    '[class*="member-since"]',
    '[class*="joined-date"]',
    '[class*="date-joined"]',
]
SERVICE_SELECTOR = (
    '[data-testid="service"], [class*="service-tag"], '
    '[class*="specialty"], [class*="skill"]'
)
PROFILE_LINK_SELECTORS = ['a[data-testid="profile-link"]', 'a[class*="profile"]']

RATING_PATTERNS = [re.compile(r"(\d+(?:\.\d+)?)\s*(?:stars?|/\s*5)", re.IGNORECASE)]
REVIEW_COUNT_PATTERNS = [
    re.compile(r"(\d+)\s*reviews?", re.IGNORECASE),
    re.compile(r"(\d+)\s*ratings?", re.IGNORECASE),
]
RESPONSE_TIME_PATTERNS = [re.compile(r"responds?\s+in\s+([^<]+)", re.IGNORECASE)]
JOINED_DATE_PATTERNS = [
    re.compile(r"member\s+since\s+([^<]+)", re.IGNORECASE),
    re.compile(r"joined\s+([^<]+)", re.IGNORECASE),
]
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")
VERIFICATION_MARKERS = ("verified", "badge")
REVIEW_COUNT_CLASS_MARKERS = ("review-count", "reviews-number", "total-reviews")
MAX_RATING = 5.0


def _clean(text: Optional[str]) -> str:
    """Collapse whitespace and decode entities."""
    if not text:
        return ""
    return " ".join(html_lib.unescape(text).split())


def _parse_float(text: str) -> Optional[float]:
    match = NUMBER_PATTERN.search(text)
    return float(match.group(0)) if match else None


def _parse_rating(text: str) -> Optional[float]:
    rating = _parse_float(text)
    if rating is None or not 0.0 <= rating <= MAX_RATING:
        return None
    return rating


def _marks_review_count(tag: Tag) -> bool:
    classes = " ".join(tag.get("class") or []).lower()
    return any(marker in classes for marker in REVIEW_COUNT_CLASS_MARKERS)


def _rating_text(element: Tag) -> str:
    """Text of a rating element, leaving out any nested review counts."""
    parts = []
    for text in element.find_all(string=True):
        owner = text.parent
        while owner is not None and owner is not element and not _marks_review_count(owner):
            owner = owner.parent
        if owner is element or owner is None:
            parts.append(text)
    return _clean(" ".join(parts))


def _parse_int(text: str) -> Optional[int]:
    match = re.search(r"\d+", text)
    return int(match.group(0)) if match else None


def _parse_email(text: str) -> Optional[str]:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


class FieldExtractor:
    """Extracts lead fields from provider card fragments."""

    def __init__(
        self,
        locale: Locale = US_LOCALE,
        phone_extractor: Optional[PhoneExtractor] = None,
        max_services: int = 10,
        parser: str = "html.parser",
    ):
        """
        Initialize the field extractor.

        Args:
            locale: Market defaults and phone rules
            phone_extractor: Phone extractor to use (built from the locale if None)
            max_services: Maximum number of service tags kept per lead
            parser: BeautifulSoup parser name
        """
        self.locale = locale
        self.phone_extractor = phone_extractor or PhoneExtractor(locale)
        self.max_services = max_services
        self.parser = parser

    def _card_root(self, html: str) -> Tag:
        soup = BeautifulSoup(html, self.parser)
        root = soup.find(True)
        # Selectors only see descendants, so the card's own classes never match.
        return root if isinstance(root, Tag) else soup

    def _first_value(
        self,
        root: Tag,
        selectors: Sequence[str],
        parse: Callable[[str], Optional[T]],
    ) -> Optional[T]:
        for selector in selectors:
            for element in root.select(selector):
                value = parse(_clean(element.get_text(" ")))
                if value is not None and value != "":
                    return value
        return None

    def _first_text(self, root: Tag, selectors: Sequence[str]) -> Optional[str]:
        return self._first_value(root, selectors, lambda text: text or None)

    @staticmethod
    def _first_match(html: str, patterns: Sequence[re.Pattern]) -> Optional[str]:
        for pattern in patterns:
            match = pattern.search(html)
            if match:
                value = _clean(match.group(1))
                if value:
                    return value
        return None

    def extract_email(self, root: Tag, html: str) -> Optional[str]:
        """mailto: links first, then email markers, then any bare address."""
        for link in root.select('a[href^="mailto:"]'):
            address = link["href"][len("mailto:"):].split("?")[0].strip()
            email = _parse_email(address)
            if email:
                return email

        email = self._first_value(root, EMAIL_SELECTORS, _parse_email)
        if email:
            return email

        return _parse_email(html_lib.unescape(html))

    def extract_services(self, root: Tag) -> List[str]:
        """Service/specialty/skill tags in document order, no deduplication."""
        services = []
        for element in root.select(SERVICE_SELECTOR):
            # Containers such as "skills-list" hold the tags themselves.
            if element.select_one(SERVICE_SELECTOR):
                continue
            text = _clean(element.get_text(" "))
            if text:
                services.append(text)
            if len(services) >= self.max_services:
                break
        return services

    def extract_rating(self, root: Tag, html: str) -> float:
        for selector in RATING_SELECTORS:
            for element in root.select(selector):
                if _marks_review_count(element):
                    continue
                rating = _parse_rating(_rating_text(element))
                if rating is not None:
                    return rating

        for pattern in RATING_PATTERNS:
            for match in pattern.finditer(html):
                rating = _parse_rating(match.group(1))
                if rating is not None:
                    return rating

        return self.locale.default_rating

    def extract_review_count(self, root: Tag, html: str) -> int:
        count = self._first_value(root, REVIEW_COUNT_SELECTORS, _parse_int)
        if count is None:
            match = self._first_match(html, REVIEW_COUNT_PATTERNS)
            count = int(match) if match else 0
        return max(count, 0)

    def extract_profile_url(self, root: Tag, source_url: str) -> str:
        for selector in PROFILE_LINK_SELECTORS:
            link = root.select_one(selector)
            if link and link.get("href"):
                return urljoin(source_url, link["href"])
        return source_url

    def default_business_name(self, person_name: PersonName) -> str:
        if person_name.is_default:
            return BUSINESS_PLACEHOLDER
        name = self.locale.business_name_template.format(
            first_name=person_name.first_name,
            last_name=person_name.last_name,
        ).strip()
        return name or BUSINESS_PLACEHOLDER

    def extract(self, fragment: ProviderCardFragment, source_url: str = "") -> ExtractedLead:
        """
        Extract a lead from a provider card.

        Args:
            fragment: Card markup
            source_url: Page the card came from

        Returns:
            ExtractedLead: Unscored lead, possibly made of defaults only
        """
        html = fragment.html or ""
        try:
            root = self._card_root(html)

            person_name = resolve_name(
                self._first_text(root, FIRST_NAME_SELECTORS),
                self._first_text(root, LAST_NAME_SELECTORS),
                self._first_text(root, FULL_NAME_SELECTORS),
            )
            business_name = (
                self._first_text(root, BUSINESS_SELECTORS)
                or self.default_business_name(person_name)
            )

            response_time = (
                self._first_text(root, RESPONSE_TIME_SELECTORS)
                or self._first_match(html, RESPONSE_TIME_PATTERNS)
            )
            joined_date = (
                self._first_text(root, JOINED_DATE_SELECTORS)
                or self._first_match(html, JOINED_DATE_PATTERNS)
            )

            lowered = html.lower()
            verified = any(marker in lowered for marker in VERIFICATION_MARKERS)

            return ExtractedLead(
                person_name=person_name,
                business_name=business_name,
                phones=self.phone_extractor.extract(html),
                email=self.extract_email(root, html),
                location=self._first_text(root, LOCATION_SELECTORS) or self.locale.location_placeholder,
                category=self._first_text(root, CATEGORY_SELECTORS) or self.locale.category_placeholder,
                rating=self.extract_rating(root, html),
                review_count=self.extract_review_count(root, html),
                description=(
                    self._first_text(root, DESCRIPTION_SELECTORS)
                    or self.locale.description_placeholder
                ),
                services=self.extract_services(root),
                response_time=response_time,
                verification_status=(
                    VerificationStatus.VERIFIED if verified else VerificationStatus.UNVERIFIED
                ),
                joined_date=joined_date,
                profile_url=self.extract_profile_url(root, source_url),
            )
        except Exception as e:
            logger.error(f"Error extracting card {fragment.index}: {str(e)}")
            return ExtractedLead(
                business_name=BUSINESS_PLACEHOLDER,
                location=self.locale.location_placeholder,
                category=self.locale.category_placeholder,
                rating=self.locale.default_rating,
                description=self.locale.description_placeholder,
                profile_url=source_url,
            )
