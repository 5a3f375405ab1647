#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Market locales for the lead decoder.

A Locale bundles everything that differs between target markets: phone
country code and grouping, the phone pattern battery, currency, the base lead
value, the category multiplier table and the area-code region table. All
tables are plain immutable data so tests can build synthetic locales.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from bark_lead_decoder.exceptions import LocaleConfigError

LOCATION_PLACEHOLDER = "Location not specified"
CATEGORY_PLACEHOLDER = "General Services"
BUSINESS_PLACEHOLDER = "Business"

HIGH_VALUE_CATEGORIES = (
    "business services",
    "marketing",
    "consultancy",
    "professional services",
)


def _invert_regions(regions: Mapping[str, Any]) -> Dict[str, str]:
    """Turn {region: [codes]} into {code: region}."""
    table = {}
    for region, codes in regions.items():
        for code in codes:
            table[str(code)] = region
    return table


@dataclass(frozen=True)
class Locale:
    """Market-specific decoding and valuation settings."""

    name: str
    country_code: str
    national_number_length: int
    phone_groups: Tuple[int, ...]
    phone_template: str
    phone_patterns: Tuple[str, ...]
    currency_symbol: str
    base_value: int
    category_multipliers: Tuple[Tuple[str, float], ...]
    trunk_prefix: Optional[str] = None
    mobile_prefixes: Tuple[str, ...] = ()
    landline_prefixes: Tuple[str, ...] = ()
    high_value_categories: Tuple[str, ...] = HIGH_VALUE_CATEGORIES
    area_code_regions: Dict[str, str] = field(default_factory=dict, hash=False)
    location_placeholder: str = LOCATION_PLACEHOLDER
    category_placeholder: str = CATEGORY_PLACEHOLDER
    description_placeholder: str = "Professional service provider"
    business_name_template: str = "{first_name} {last_name} Services"
    default_rating: float = 4.0

    def format_currency(self, amount: int) -> str:
        """Format a whole amount with thousands separators, e.g. $1,650."""
        return f"{self.currency_symbol}{amount:,}"

    def format_phone(self, national_number: str) -> str:
        """Render a national number using the locale grouping."""
        groups = []
        start = 0
        for size in self.phone_groups:
            groups.append(national_number[start:start + size])
            start += size
        return self.phone_template.format(*groups, cc=self.country_code)

    def region_for(self, national_number: str) -> Optional[str]:
        """Longest-prefix lookup of the region served by a national number."""
        for length in range(min(len(national_number), 5), 0, -1):
            region = self.area_code_regions.get(national_number[:length])
            if region:
                return region
        return None


US_AREA_CODES = _invert_regions({
    "Florida": ["305", "786", "954", "754", "561", "407", "321", "813", "727", "904"],
    "Texas": ["214", "972", "469", "713", "281", "832", "512", "737", "210", "726"],
    "California": ["213", "323", "310", "424", "818", "747", "626", "909", "951", "415"],
    "New York": ["212", "646", "332", "917", "718", "347", "929", "516", "631"],
    "Georgia": ["404", "678", "470", "770", "762", "706", "912", "229"],
    "North Carolina": ["704", "980", "828", "336", "910", "919", "984", "252"],
    "Illinois": ["312", "773", "872", "847", "224", "630", "331", "708"],
    "Nevada": ["702", "725", "775"],
    "Arizona": ["602", "623", "480", "520", "928"],
    "Washington": ["206", "253", "425", "360", "564", "509"],
    "Oregon": ["503", "971", "541", "458"],
    "Colorado": ["303", "720", "970", "719"],
})

UK_AREA_CODES = _invert_regions({
    "London": ["20"],
    "Birmingham": ["121"],
    "Edinburgh": ["131"],
    "Glasgow": ["141"],
    "Liverpool": ["151"],
    "Manchester": ["161"],
    "Leeds": ["113"],
    "Bristol": ["117"],
})

US_LOCALE = Locale(
    name="us",
    country_code="1",
    national_number_length=10,
    phone_groups=(3, 3, 4),
    phone_template="+{cc} ({0}) {1}-{2}",
    phone_patterns=(
        r'href="tel:(\+?1?[\s\-\(\)]?\d{3}[\s\-\(\)]?\d{3}[\s\-]?\d{4})"',
        r"(\+1\s?\(\d{3}\)\s?\d{3}-\d{4})",
        r"(\(\d{3}\)\s?\d{3}-\d{4})",
        r"(\d{3}-\d{3}-\d{4})",
        r"(\d{3}\.\d{3}\.\d{4})",
        r"(\d{3}\s\d{3}\s\d{4})",
        r"(?<!\d)(\d{10})(?!\d)",
    ),
    currency_symbol="$",
    base_value=1500,
    category_multipliers=(
        ("legal", 2.5),
        ("construction", 2.2),
        ("marketing", 2.0),
        ("photography", 1.8),
        ("plumbing", 1.5),
        ("general", 1.0),
    ),
    area_code_regions=US_AREA_CODES,
)

UK_LOCALE = Locale(
    name="uk",
    country_code="44",
    national_number_length=10,
    phone_groups=(2, 4, 4),
    phone_template="+{cc} {0} {1} {2}",
    phone_patterns=(
        r"(?:mobile|cell|mob)[\s:]*(\+44\s*7\d{3}\s*\d{3}\s*\d{3})",
        r"(?:mobile|cell|mob)[\s:]*(\b07\d{3}\s*\d{3}\s*\d{3})",
        r"(?:landline|office|business)[\s:]*(\+44\s*\d{2,4}\s*\d{3,4}\s*\d{3,4})",
        r"(?:landline|office|business)[\s:]*(\b0\d{2,4}\s*\d{3,4}\s*\d{3,4})",
        r"(?:tel|phone)[\s:]*(\+44\s*\d{2,4}\s*\d{3,4}\s*\d{3,4})",
        r'href="tel:(\+44[\d\s]+)"',
        r'href="tel:(0[\d\s]+)"',
        r"(\+44\s*\d{2,4}\s*\d{3,4}\s*\d{3,4})",
        r"(\b0\d{2,4}\s*\d{3,4}\s*\d{3,4})",
        r"(\b\d{11})",
        r"(\+44\d{10})",
    ),
    currency_symbol="£",
    base_value=1000,
    category_multipliers=(
        ("business services", 3.5),
        ("marketing", 4.0),
        ("consultancy", 3.8),
        ("professional services", 3.2),
        ("home improvement", 2.5),
        ("events", 2.8),
        ("wellness", 2.0),
        ("fitness", 1.8),
    ),
    trunk_prefix="0",
    mobile_prefixes=("7",),
    landline_prefixes=("1", "2", "3", "4", "5", "6"),
    area_code_regions=UK_AREA_CODES,
    description_placeholder="No description available",
    business_name_template="{first_name} {last_name}",
)

BUILTIN_LOCALES: Dict[str, Locale] = {
    US_LOCALE.name: US_LOCALE,
    UK_LOCALE.name: UK_LOCALE,
}

_TUPLE_FIELDS = {
    "phone_groups",
    "phone_patterns",
    "mobile_prefixes",
    "landline_prefixes",
    "high_value_categories",
}


def get_locale(name: str) -> Locale:
    """Return a built-in locale by name; raises KeyError if unknown."""
    return BUILTIN_LOCALES[name.lower()]


def locale_from_dict(data: Dict[str, Any], base: Optional[Locale] = None) -> Locale:
    """
    Build a Locale from a JSON-style dictionary.

    Args:
        data: Locale keys. ``area_code_regions`` is given as
            ``{region: [codes]}`` and ``category_multipliers`` as a list of
            ``[keyword, multiplier]`` pairs (priority order).
        base: Locale providing values for keys not present in ``data``.

    Returns:
        Locale: The resulting locale

    Raises:
        LocaleConfigError: If keys are unknown or values malformed.
    """
    known = {f.name for f in fields(Locale)}
    unknown = set(data) - known
    if unknown:
        raise LocaleConfigError(f"Unknown locale keys: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    try:
        for key, value in data.items():
            if key in _TUPLE_FIELDS:
                value = tuple(value)
            elif key == "category_multipliers":
                value = tuple((str(keyword).lower(), float(mult)) for keyword, mult in value)
            elif key == "area_code_regions":
                value = _invert_regions(value)
            elif key in ("national_number_length", "base_value"):
                value = int(value)
            elif key == "default_rating":
                value = float(value)
            values[key] = value
    except (TypeError, ValueError) as e:
        raise LocaleConfigError(f"Malformed locale definition: {e}") from e

    if base is not None:
        locale = replace(base, **values)
    else:
        try:
            locale = Locale(**values)
        except TypeError as e:
            raise LocaleConfigError(f"Incomplete locale definition: {e}") from e

    if sum(locale.phone_groups) != locale.national_number_length:
        raise LocaleConfigError(
            f"Phone groups {locale.phone_groups} do not cover "
            f"{locale.national_number_length} digits"
        )
    return locale
