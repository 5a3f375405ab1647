#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Contact storage for decoded leads.

Implements SQLAlchemy ORM persistence for CRM contacts with proper session
management. ContactStore satisfies the ContactRepository interface used by the
contact sink.
"""

import os
import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple, Iterator, Union
from contextlib import contextmanager

from sqlalchemy import create_engine, Column, String, Integer, DateTime, Text, Index
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func
from sqlalchemy.exc import SQLAlchemyError

from bark_lead_decoder.config import config
from bark_lead_decoder.exceptions import ContactStoreError
from bark_lead_decoder.models.contact import Contact, ContactCreate

# Configure logger
logger = logging.getLogger(__name__)

# Create base class for ORM models
Base = declarative_base()

EXPORT_FIELDS = [
    'id', 'first_name', 'last_name', 'email', 'phone', 'company', 'position',
    'lead_source', 'lead_status', 'notes', 'tags', 'created_by', 'created_at',
]


class ContactModel(Base):
    """SQLAlchemy ORM model for contacts."""

    __tablename__ = 'contacts'

    id = Column(Integer, primary_key=True, autoincrement=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), index=True)
    phone = Column(String(50))
    company = Column(String(255), index=True)
    position = Column(String(100))

    lead_source = Column(String(100), index=True)
    lead_status = Column(String(50), nullable=False, default="new", index=True)
    notes = Column(Text)
    tags = Column(JSON, default=list)

    created_by = Column(Integer)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Indexes
    __table_args__ = (
        Index('idx_contacts_source_status', 'lead_source', 'lead_status'),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert ORM model to dictionary."""
        result = {c.name: getattr(self, c.name) for c in self.__table__.columns}

        # Convert dates to ISO format
        for date_field in ['created_at', 'updated_at']:
            if result[date_field]:
                result[date_field] = result[date_field].isoformat()

        result['tags'] = list(result['tags'] or [])
        return result

    @classmethod
    def from_contact(cls, fields: ContactCreate) -> "ContactModel":
        """Create ORM model from the Pydantic payload."""
        return cls(**fields.model_dump())


class ContactStore:
    """
    Storage manager for CRM contacts.

    Provides methods for creating, retrieving, counting and exporting contacts.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None, db_url: Optional[str] = None):
        """
        Initialize the contact storage.

        Args:
            db_path: SQLite database file (defaults to LEAD_DB_PATH)
            db_url: Full SQLAlchemy URL; takes precedence over db_path
        """
        if db_url is None:
            path = Path(db_path) if db_path else config.db_path
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            db_url = f"sqlite:///{path}"

        engine_kwargs: Dict[str, Any] = {}
        if db_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in db_url or db_url == "sqlite://":
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool

        self.db_url = db_url
        self.engine = create_engine(db_url, **engine_kwargs)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        # Initialize tables if they don't exist
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Yields:
            Session: SQLAlchemy session

        Raises:
            ContactStoreError: If a database error occurs
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error: {str(e)}")
            raise ContactStoreError(f"Database error: {str(e)}") from e
        except Exception as e:
            session.rollback()
            logger.error(f"Unexpected error: {str(e)}")
            raise
        finally:
            session.close()

    def create_contact(self, fields: ContactCreate) -> Contact:
        """
        Create a contact.

        Args:
            fields: Contact payload

        Returns:
            Contact: Persisted contact with ID
        """
        with self.session_scope() as session:
            contact_model = ContactModel.from_contact(fields)
            session.add(contact_model)

            # Flush to get ID
            session.flush()

            result = self._orm_to_pydantic(contact_model)

        return result

    def get_contact(self, contact_id: int) -> Optional[Contact]:
        """
        Get a contact by ID.

        Args:
            contact_id: Contact ID

        Returns:
            Optional[Contact]: Contact if found, None otherwise
        """
        with self.session_scope() as session:
            contact_model = session.get(ContactModel, contact_id)
            return self._orm_to_pydantic(contact_model) if contact_model else None

    def list_contacts(
        self,
        lead_source: Optional[str] = None,
        lead_status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[Contact], int]:
        """
        List contacts, newest first.

        Args:
            lead_source: Only contacts with this source
            lead_status: Only contacts with this status
            limit: Maximum number of contacts to return
            offset: Offset for pagination

        Returns:
            Tuple[List[Contact], int]: Contacts and total count
        """
        with self.session_scope() as session:
            query = session.query(ContactModel)
            if lead_source:
                query = query.filter(ContactModel.lead_source == lead_source)
            if lead_status:
                query = query.filter(ContactModel.lead_status == lead_status)

            total = query.count()
            contact_models = query.order_by(ContactModel.id.desc()).limit(limit).offset(offset).all()

            return [self._orm_to_pydantic(model) for model in contact_models], total

    def export_contacts_to_csv(self, filename: str, contacts: Optional[List[Contact]] = None) -> str:
        """
        Export contacts to a CSV file.

        Args:
            filename: Output filename
            contacts: List of contacts to export (or None to export all)

        Returns:
            str: Path to the exported file
        """
        # Ensure output directory exists
        os.makedirs(os.path.dirname(os.path.abspath(filename)), exist_ok=True)

        if contacts is None:
            contacts = self._all_contacts()

        with open(filename, 'w', newline='', encoding='utf-8') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=EXPORT_FIELDS)
            writer.writeheader()

            for contact in contacts:
                row = contact.model_dump(mode="json", include=set(EXPORT_FIELDS))
                row['tags'] = ', '.join(contact.tags)
                writer.writerow({field: '' if row.get(field) is None else row[field]
                                 for field in EXPORT_FIELDS})

        return filename

    def export_contacts_to_json(self, filename: str, contacts: Optional[List[Contact]] = None) -> str:
        """
        Export contacts to a JSON file.

        Args:
            filename: Output filename
            contacts: List of contacts to export (or None to export all)

        Returns:
            str: Path to the exported file
        """
        os.makedirs(os.path.dirname(os.path.abspath(filename)), exist_ok=True)

        if contacts is None:
            contacts = self._all_contacts()

        with open(filename, 'w', encoding='utf-8') as jsonfile:
            json.dump([contact.model_dump(mode="json") for contact in contacts], jsonfile, indent=2)

        return filename

    def count_contacts_by_source(self) -> Dict[str, int]:
        """
        Count contacts by lead source.

        Returns:
            Dict[str, int]: Dictionary with sources as keys and counts as values
        """
        with self.session_scope() as session:
            counts = session.query(
                ContactModel.lead_source,
                func.count(ContactModel.id).label('count')
            ).group_by(ContactModel.lead_source).all()

            return {source if source else 'unknown': count for source, count in counts}

    def count_contacts_by_status(self) -> Dict[str, int]:
        """
        Count contacts by lead status.

        Returns:
            Dict[str, int]: Dictionary with statuses as keys and counts as values
        """
        with self.session_scope() as session:
            counts = session.query(
                ContactModel.lead_status,
                func.count(ContactModel.id).label('count')
            ).group_by(ContactModel.lead_status).all()

            return {status: count for status, count in counts}

    def _all_contacts(self) -> List[Contact]:
        with self.session_scope() as session:
            return [self._orm_to_pydantic(model)
                    for model in session.query(ContactModel).order_by(ContactModel.id).all()]

    def _orm_to_pydantic(self, contact_model: ContactModel) -> Contact:
        """
        Convert ORM model to Pydantic model.

        Args:
            contact_model: SQLAlchemy model

        Returns:
            Contact: Pydantic model
        """
        return Contact.model_validate(contact_model.to_dict())
