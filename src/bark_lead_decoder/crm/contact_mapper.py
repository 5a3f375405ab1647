#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Contact Mapper

Maps decoded leads to CRM contact payloads: the person and business fields,
a human-readable notes line summarising the listing for sales review, and the
tags used to filter contacts by category, source and verification.
"""

from typing import List, Optional

from bark_lead_decoder.decoder.phones import PhoneNormalizer
from bark_lead_decoder.locales import Locale, US_LOCALE
from bark_lead_decoder.models.contact import ContactCreate
from bark_lead_decoder.models.lead import ExtractedLead

DEFAULT_SOURCE_TAG = "bark.com"
DEFAULT_POSITION = "Business Owner"
DEFAULT_STATUS = "new"
MAX_SERVICE_TAGS = 3
NOTES_SEPARATOR = " | "


class ContactMapper:
    """
    Maps ExtractedLead objects to ContactCreate payloads.
    """

    def __init__(self, locale: Locale = US_LOCALE, source_tag: str = DEFAULT_SOURCE_TAG):
        self.locale = locale
        self.source_tag = source_tag
        self.normalizer = PhoneNormalizer(locale)

    def phone_details(self, lead: ExtractedLead) -> List[str]:
        """Labelled phone slots, plus the area served by the best number."""
        details = []
        for label, number in (
            ("Primary", lead.phones.primary),
            ("Mobile", lead.phones.mobile),
            ("Landline", lead.phones.landline),
        ):
            if number:
                details.append(f"{label}: {number}")

        region = self.normalizer.region_for(lead.phones.best())
        if region:
            details.append(f"Area: {region}")
        return details

    def build_notes(self, lead: ExtractedLead) -> str:
        """
        Summarise a lead for human review.

        Args:
            lead: Decoded lead

        Returns:
            str: Pipe-separated notes
        """
        parts: List[Optional[str]] = [
            lead.description,
            f"Rating: {lead.rating:g}/5 ({lead.review_count} reviews)",
            f"Services: {', '.join(lead.services)}" if lead.services else None,
            f"Verification: {lead.verification_status.value}",
            f"Location: {lead.location}",
        ]

        phone_details = self.phone_details(lead)
        if phone_details:
            parts.append(f"Contact: {NOTES_SEPARATOR.join(phone_details)}")

        if lead.estimated_value:
            parts.append(f"Estimated Value: {lead.estimated_value}")
        if lead.joined_date:
            parts.append(f"Member since: {lead.joined_date}")

        return NOTES_SEPARATOR.join(part for part in parts if part)

    def build_tags(self, lead: ExtractedLead) -> List[str]:
        """Category, source, verification and up to three services."""
        tags = [
            lead.category,
            self.source_tag,
            lead.verification_status.value.lower(),
        ]
        tags.extend(lead.services[:MAX_SERVICE_TAGS])
        return [tag for tag in tags if tag]

    def map_lead(self, lead: ExtractedLead, user_id: Optional[int] = None) -> ContactCreate:
        """
        Map a lead to a contact payload.

        Args:
            lead: Decoded, validated lead
            user_id: User recorded as the contact's creator

        Returns:
            ContactCreate: Payload for the contact repository
        """
        return ContactCreate(
            first_name=lead.first_name,
            last_name=lead.last_name,
            email=lead.email,
            phone=lead.phones.best(),
            company=lead.business_name,
            position=DEFAULT_POSITION,
            lead_source=self.source_tag,
            lead_status=DEFAULT_STATUS,
            notes=self.build_notes(lead),
            tags=self.build_tags(lead),
            created_by=user_id,
        )
