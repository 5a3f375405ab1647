"""
Decoding components for the Bark Lead Decoder.

This package splits directory pages into provider cards and extracts lead
fields, including names and phone numbers, from each card.
"""

from bark_lead_decoder.decoder.segmenter import CardSegmenter
from bark_lead_decoder.decoder.extractor import FieldExtractor
from bark_lead_decoder.decoder.names import parse_full_name
from bark_lead_decoder.decoder.phones import PhoneExtractor, PhoneNormalizer

__all__ = [
    "CardSegmenter",
    "FieldExtractor",
    "PhoneExtractor",
    "PhoneNormalizer",
    "parse_full_name",
]
