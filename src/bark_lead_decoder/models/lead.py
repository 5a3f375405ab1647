#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Lead Model - Defines the structure of decoded provider leads.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_FIRST_NAME = "Unknown"
DEFAULT_LAST_NAME = "Provider"


class VerificationStatus(str, Enum):
    """Verification badge state of a provider."""
    VERIFIED = "Verified"
    UNVERIFIED = "Unverified"


class RawDocument(BaseModel):
    """A fetched or uploaded HTML page plus its provenance."""

    html: str = ""
    source_url: str = ""
    fetched_at: datetime = Field(default_factory=datetime.now)

    @field_validator("html", mode="before")
    @classmethod
    def coerce_html(cls, value: Any) -> str:
        # Non-string payloads decode to nothing rather than failing.
        return value if isinstance(value, str) else ""


class ProviderCardFragment(BaseModel):
    """Markup believed to hold a single provider listing."""

    model_config = ConfigDict(frozen=True)

    index: int
    html: str


class PersonName(BaseModel):
    """First and last name of the person behind a listing."""

    model_config = ConfigDict(frozen=True)

    first_name: str = DEFAULT_FIRST_NAME
    last_name: str = DEFAULT_LAST_NAME

    @property
    def is_default(self) -> bool:
        return self.first_name == DEFAULT_FIRST_NAME and self.last_name == DEFAULT_LAST_NAME

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PhoneNumbers(BaseModel):
    """Canonicalised phone numbers by slot."""

    model_config = ConfigDict(frozen=True)

    primary: Optional[str] = None
    mobile: Optional[str] = None
    landline: Optional[str] = None

    def best(self) -> Optional[str]:
        """Primary number, falling back to mobile then landline."""
        return self.primary or self.mobile or self.landline


class ExtractedLead(BaseModel):
    """
    Provider lead decoded from a single card.

    Immutable: lead_score and estimated_value are filled in by the scorer via
    model_copy and are never edited afterwards.
    """

    model_config = ConfigDict(frozen=True)

    person_name: PersonName = Field(default_factory=PersonName)
    business_name: str = ""
    phones: PhoneNumbers = Field(default_factory=PhoneNumbers)
    email: Optional[str] = None
    location: str = ""
    category: str = ""
    rating: float = Field(0.0, ge=0.0, le=5.0)
    review_count: int = Field(0, ge=0)
    description: str = ""
    services: List[str] = Field(default_factory=list)
    response_time: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    joined_date: Optional[str] = None
    profile_url: str = ""
    lead_score: int = Field(0, ge=0, le=100)
    estimated_value: str = ""

    @property
    def first_name(self) -> str:
        return self.person_name.first_name

    @property
    def last_name(self) -> str:
        return self.person_name.last_name

    @property
    def full_name(self) -> str:
        return str(self.person_name)

    @property
    def phone(self) -> Optional[str]:
        return self.phones.primary

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED

    def to_dict(self) -> Dict[str, Any]:
        """Convert lead to a JSON-friendly dictionary."""
        return self.model_dump(mode="json")


class DecodeResult(BaseModel):
    """Outcome of decoding and storing one document."""

    leads: List[ExtractedLead] = Field(default_factory=list)
    stored_count: int = 0
    rejected_count: int = 0
    failed_count: int = 0
    source_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
