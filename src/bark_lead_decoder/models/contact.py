#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Contact Model - CRM contact records created from accepted leads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ContactCreate(BaseModel):
    """Fields handed to the contact repository for a new contact."""

    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: str = "new"
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_by: Optional[int] = None


class Contact(ContactCreate):
    """A persisted CRM contact."""

    id: int
    created_at: datetime = Field(default_factory=datetime.now)
