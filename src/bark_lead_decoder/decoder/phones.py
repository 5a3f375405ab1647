"""Phone number extraction and normalisation.

Numbers are found by running the locale's ordered pattern battery over the raw
card markup, reduced to digits and rendered in the locale's canonical format.

Slot assignment is deliberately crude. The first number found is the primary
one. When a locale classifies numbers by national prefix (UK mobiles start
with 7) that decides the slot; otherwise a "mobile"/"cell" keyword anywhere
in the card sends the number to the mobile slot, else an "office"/"business"
keyword sends it to the landline slot. Slots are first-write-wins. Because the
keywords are searched across the whole card, boilerplate such as a
``business-name`` class is enough to fill a slot; ``scoped_context`` limits
the search to a window of text just before each number instead.
"""

import logging
import re
from typing import List, Optional, Pattern, Tuple

from bark_lead_decoder.locales import Locale, US_LOCALE
from bark_lead_decoder.models.lead import PhoneNumbers

logger = logging.getLogger(__name__)

MOBILE_KEYWORDS = ("mobile", "cell")
LANDLINE_KEYWORDS = ("office", "business")

NON_DIGIT_PATTERN = re.compile(r"\D")


class PhoneNormalizer:
    """Reduces raw phone text to a canonical locale number."""

    def __init__(self, locale: Locale = US_LOCALE):
        self.locale = locale

    def to_national(self, raw: Optional[str]) -> Optional[str]:
        """
        Reduce a raw phone string to its national significant number.

        Accepts exactly the national length, the country code followed by the
        national length, or (where the locale has one) the trunk prefix
        followed by the national length.
        """
        if not raw:
            return None

        digits = NON_DIGIT_PATTERN.sub("", raw)
        length = self.locale.national_number_length
        country_code = self.locale.country_code
        trunk = self.locale.trunk_prefix

        if len(digits) == len(country_code) + length and digits.startswith(country_code):
            return digits[len(country_code):]
        if len(digits) == length:
            return digits
        if trunk and len(digits) == len(trunk) + length and digits.startswith(trunk):
            return digits[len(trunk):]
        return None

    def normalize(self, raw: Optional[str]) -> Optional[str]:
        """Canonical form of a phone string, or None if it isn't a valid number."""
        national = self.to_national(raw)
        if national is None:
            return None
        return self.locale.format_phone(national)

    def region_for(self, phone: Optional[str]) -> Optional[str]:
        """Region served by the number's area code, if known."""
        national = self.to_national(phone)
        if national is None:
            return None
        return self.locale.region_for(national)


class PhoneExtractor:
    """Finds phone numbers in card markup and assigns them to slots."""

    def __init__(
        self,
        locale: Locale = US_LOCALE,
        scoped_context: bool = False,
        context_window: int = 40,
    ):
        """
        Args:
            locale: Market whose phone patterns and format apply
            scoped_context: Look for slot keywords only just before each number
            context_window: Characters searched before a number when scoped
        """
        self.locale = locale
        self.normalizer = PhoneNormalizer(locale)
        self.scoped_context = scoped_context
        self.context_window = context_window
        self.patterns: List[Pattern[str]] = [
            re.compile(pattern, re.IGNORECASE) for pattern in locale.phone_patterns
        ]

    def find_numbers(self, html: str) -> List[Tuple[str, int]]:
        """
        Run the pattern battery over the markup.

        Returns:
            List of (canonical number, match offset) in discovery order,
            without duplicates
        """
        found: List[Tuple[str, int]] = []
        seen = set()

        for pattern in self.patterns:
            for match in pattern.finditer(html):
                number = self.normalizer.normalize(match.group(1))
                if number and number not in seen:
                    seen.add(number)
                    found.append((number, match.start(1)))

        return found

    def _classify_by_prefix(self, number: str) -> Optional[str]:
        national = self.normalizer.to_national(number) or ""
        if self.locale.mobile_prefixes and national.startswith(self.locale.mobile_prefixes):
            return "mobile"
        if self.locale.landline_prefixes and national.startswith(self.locale.landline_prefixes):
            return "landline"
        return None

    def _classify_by_keyword(self, lowered: str, offset: int) -> Optional[str]:
        if self.scoped_context:
            context = lowered[max(0, offset - self.context_window):offset]
        else:
            context = lowered

        if any(keyword in context for keyword in MOBILE_KEYWORDS):
            return "mobile"
        elif any(keyword in context for keyword in LANDLINE_KEYWORDS):
            return "landline"
        return None

    def extract(self, html: Optional[str]) -> PhoneNumbers:
        """
        Extract primary, mobile and landline numbers from a card.

        Args:
            html: Raw card markup

        Returns:
            PhoneNumbers: Slots filled first-write-wins
        """
        if not html:
            return PhoneNumbers()

        numbers = self.find_numbers(html)
        lowered = html.lower()
        slots = {"primary": None, "mobile": None, "landline": None}

        for number, offset in numbers:
            if slots["primary"] is None:
                slots["primary"] = number

            slot = self._classify_by_prefix(number) or self._classify_by_keyword(lowered, offset)
            if slot and slots[slot] is None:
                slots[slot] = number

        if numbers:
            logger.debug(f"Found phone numbers: {', '.join(n for n, _ in numbers)}")

        return PhoneNumbers(**slots)
