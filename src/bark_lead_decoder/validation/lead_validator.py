"""
Lead Validator - Rejects leads that extraction could not fill in.

A decoded card only becomes a contact when it looks like a real listing: a
name that is not the default placeholder pair, a business name, at least one
way of reaching the provider and a real location. Failing any of these checks
rejects the lead; rejection is not an error.
"""

import os
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from bark_lead_decoder.locales import Locale, US_LOCALE
from bark_lead_decoder.models.lead import DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME, ExtractedLead

# Set up logger
logger = logging.getLogger(__name__)

ENV_PREFIX = "BARK_DECODER_VALIDATOR_"


class ValidationLevel(Enum):
    """Enumeration of validation severity levels."""
    CRITICAL = "critical"  # Validation must pass or lead is rejected
    ADVISORY = "advisory"  # Reported, never rejects on its own


class ValidationResult:
    """Class representing the result of a validation operation."""

    def __init__(self,
                 is_valid: bool = True,
                 messages: Optional[List[str]] = None,
                 level: ValidationLevel = ValidationLevel.CRITICAL):
        """
        Initialize a validation result.

        Args:
            is_valid: Boolean indicating if validation passed.
            messages: List of validation messages/reasons.
            level: ValidationLevel indicating severity of this validation.
        """
        self.is_valid = is_valid
        self.messages = messages or []
        self.level = level

    def append_message(self, message: str) -> None:
        """Append a message to the validation messages."""
        self.messages.append(message)

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """
        Merge another validation result into this one.

        Only failed CRITICAL results make the merged result invalid.

        Args:
            other: Another ValidationResult to merge with this one.

        Returns:
            The merged ValidationResult.
        """
        if not other.is_valid and other.level == ValidationLevel.CRITICAL:
            self.is_valid = False

        self.messages.extend(other.messages)
        return self


class LeadValidator:
    """
    Validator deciding which decoded leads are worth storing.
    """

    def __init__(self,
                 locale: Locale = US_LOCALE,
                 config_override: Optional[Dict[str, Any]] = None):
        """
        Initialize the lead validator.

        Args:
            locale: Locale whose placeholders count as missing values.
            config_override: Optional configuration overrides.
        """
        self.locale = locale
        self._load_configuration(config_override)
        logger.debug(f"Lead validator initialized with configuration: {self.config}")

    def _load_configuration(self, config_override: Optional[Dict[str, Any]] = None) -> None:
        """
        Load validator configuration and apply overrides.

        Args:
            config_override: Optional configuration overrides.
        """
        default_config: Dict[str, Any] = {
            'min_business_name_length': 3,
            'min_location_length': 1,
            'require_contact': True,
            'location_placeholders': [self.locale.location_placeholder],
        }

        if config_override:
            default_config.update(config_override)

        # Apply environment variable overrides
        for key in default_config:
            env_var = f"{ENV_PREFIX}{key.upper()}"
            if env_var in os.environ:
                try:
                    value = os.environ[env_var]
                    if isinstance(default_config[key], bool):
                        default_config[key] = value.lower() in ('true', 'yes', '1')
                    elif isinstance(default_config[key], int):
                        default_config[key] = int(value)
                    elif isinstance(default_config[key], list):
                        default_config[key] = json.loads(value)
                    else:
                        default_config[key] = value
                except (ValueError, TypeError) as e:
                    logger.warning(f"Failed to parse environment variable {env_var}: {e}")

        self.config = default_config

    def check_name(self, lead: ExtractedLead) -> ValidationResult:
        """Reject the untouched default name pair."""
        if lead.first_name == DEFAULT_FIRST_NAME and lead.last_name == DEFAULT_LAST_NAME:
            return ValidationResult(
                is_valid=False,
                messages=["No provider name found"],
            )
        return ValidationResult()

    def check_business_name(self, lead: ExtractedLead) -> ValidationResult:
        business_name = (lead.business_name or "").strip()
        if len(business_name) < self.config['min_business_name_length']:
            return ValidationResult(
                is_valid=False,
                messages=[f"Business name too short: '{business_name}'"],
            )
        return ValidationResult()

    def check_contact_info(self, lead: ExtractedLead) -> ValidationResult:
        """A primary phone or an email address is required."""
        if lead.phones.primary or lead.email:
            return ValidationResult()

        result = ValidationResult(
            is_valid=False,
            level=ValidationLevel.CRITICAL if self.config['require_contact'] else ValidationLevel.ADVISORY,
        )
        result.append_message("No phone number or email address")
        return result

    def check_location(self, lead: ExtractedLead) -> ValidationResult:
        location = (lead.location or "").strip()
        if len(location) < self.config['min_location_length']:
            return ValidationResult(is_valid=False, messages=["No location found"])
        if location in self.config['location_placeholders']:
            return ValidationResult(is_valid=False, messages=[f"Placeholder location: '{location}'"])
        return ValidationResult()

    def validate_lead(self, lead: ExtractedLead) -> Tuple[bool, List[str]]:
        """
        Apply all validation rules to a lead.

        Args:
            lead: The decoded lead to validate.

        Returns:
            Tuple containing:
                - Boolean indicating if lead passes validation
                - List of validation messages/reasons
        """
        all_results = ValidationResult()
        for check in (self.check_name, self.check_business_name,
                      self.check_contact_info, self.check_location):
            all_results.merge(check(lead))

        if all_results.is_valid:
            logger.debug(f"Lead passed validation: {lead.full_name}")
        else:
            logger.debug(f"Lead rejected: {lead.full_name} ({'; '.join(all_results.messages)})")

        return all_results.is_valid, all_results.messages

    def is_valid(self, lead: ExtractedLead) -> bool:
        """Whether a lead should be stored."""
        return self.validate_lead(lead)[0]
