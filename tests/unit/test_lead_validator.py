"""
Unit tests for the lead validator module.
"""

import os
import unittest
from dataclasses import replace
from unittest.mock import patch

from bark_lead_decoder.locales import UK_LOCALE, US_LOCALE
from bark_lead_decoder.models.lead import ExtractedLead, PersonName, PhoneNumbers
from bark_lead_decoder.validation.lead_validator import (
    LeadValidator,
    ValidationLevel,
    ValidationResult,
)


def valid_lead(**fields) -> ExtractedLead:
    values = {
        "person_name": PersonName(first_name="Sarah", last_name="Thompson"),
        "business_name": "Thompson Marketing Solutions",
        "phones": PhoneNumbers(primary="+1 (555) 123-4567"),
        "location": "Austin, TX",
        "category": "Digital Marketing",
        "rating": 4.9,
    }
    values.update(fields)
    return ExtractedLead(**values)


class TestValidationResult(unittest.TestCase):
    """Test the ValidationResult class."""

    def test_initialization(self):
        result = ValidationResult()
        self.assertTrue(result.is_valid)
        self.assertEqual(result.messages, [])
        self.assertEqual(result.level, ValidationLevel.CRITICAL)

    def test_append_message(self):
        result = ValidationResult()
        result.append_message("Message 1")
        result.append_message("Message 2")

        self.assertEqual(result.messages, ["Message 1", "Message 2"])

    def test_merge(self):
        """Test merging two ValidationResults."""
        result = ValidationResult(messages=["Result 1"])
        merged = result.merge(ValidationResult(messages=["Result 2"]))

        self.assertIs(merged, result)
        self.assertTrue(merged.is_valid)
        self.assertEqual(merged.messages, ["Result 1", "Result 2"])

        # Advisory failures are reported but do not invalidate
        merged = ValidationResult().merge(
            ValidationResult(is_valid=False, messages=["advisory"], level=ValidationLevel.ADVISORY)
        )
        self.assertTrue(merged.is_valid)
        self.assertEqual(merged.messages, ["advisory"])

        merged = ValidationResult().merge(ValidationResult(is_valid=False, messages=["critical"]))
        self.assertFalse(merged.is_valid)


class TestLeadValidator(unittest.TestCase):
    """Test the LeadValidator class."""

    def setUp(self):
        self.validator = LeadValidator(US_LOCALE)

    def test_valid_lead(self):
        is_valid, messages = self.validator.validate_lead(valid_lead())
        self.assertTrue(is_valid)
        self.assertEqual(messages, [])

    def test_email_alone_is_enough_contact(self):
        lead = valid_lead(phones=PhoneNumbers(), email="sarah@example.com")
        self.assertTrue(self.validator.is_valid(lead))

    def test_default_name_rejected(self):
        is_valid, messages = self.validator.validate_lead(valid_lead(person_name=PersonName()))
        self.assertFalse(is_valid)
        self.assertIn("No provider name found", messages)

    def test_partial_default_name_accepted(self):
        lead = valid_lead(person_name=PersonName(first_name="Cher"))
        self.assertTrue(self.validator.is_valid(lead))

    def test_short_business_name_rejected(self):
        for name in ("", "AB", "  A  "):
            with self.subTest(name=name):
                self.assertFalse(self.validator.is_valid(valid_lead(business_name=name)))
        self.assertTrue(self.validator.is_valid(valid_lead(business_name="Abc")))

    def test_missing_contact_rejected(self):
        lead = valid_lead(phones=PhoneNumbers(mobile="+1 (555) 123-4567"))
        is_valid, messages = self.validator.validate_lead(lead)

        # Only the primary slot counts
        self.assertFalse(is_valid)
        self.assertIn("No phone number or email address", messages)

    def test_contact_requirement_can_be_relaxed(self):
        validator = LeadValidator(US_LOCALE, config_override={'require_contact': False})
        is_valid, messages = validator.validate_lead(valid_lead(phones=PhoneNumbers()))

        self.assertTrue(is_valid)
        self.assertEqual(messages, ["No phone number or email address"])

    def test_location_rejected(self):
        for location in ("", "   ", "Location not specified"):
            with self.subTest(location=location):
                self.assertFalse(self.validator.is_valid(valid_lead(location=location)))

    def test_all_failures_reported(self):
        lead = ExtractedLead(business_name="X", location="Location not specified")
        is_valid, messages = self.validator.validate_lead(lead)

        self.assertFalse(is_valid)
        self.assertEqual(len(messages), 4)

    def test_locale_placeholder(self):
        locale = replace(UK_LOCALE, location_placeholder="Unknown area")
        validator = LeadValidator(locale)

        self.assertFalse(validator.is_valid(valid_lead(location="Unknown area")))
        self.assertTrue(validator.is_valid(valid_lead(location="Location not specified")))

    def test_config_override(self):
        validator = LeadValidator(US_LOCALE, config_override={'min_business_name_length': 10})
        self.assertFalse(validator.is_valid(valid_lead(business_name="Acme Ltd")))

    @patch.dict(os.environ, {
        "BARK_DECODER_VALIDATOR_MIN_BUSINESS_NAME_LENGTH": "1",
        "BARK_DECODER_VALIDATOR_REQUIRE_CONTACT": "false",
        "BARK_DECODER_VALIDATOR_LOCATION_PLACEHOLDERS": '["Nowhere"]',
    })
    def test_environment_overrides(self):
        validator = LeadValidator(US_LOCALE)

        self.assertEqual(validator.config['min_business_name_length'], 1)
        self.assertFalse(validator.config['require_contact'])
        self.assertEqual(validator.config['location_placeholders'], ["Nowhere"])
        self.assertTrue(validator.is_valid(valid_lead(business_name="A", phones=PhoneNumbers())))

    @patch.dict(os.environ, {"BARK_DECODER_VALIDATOR_MIN_LOCATION_LENGTH": "many"})
    def test_unparseable_environment_override_is_ignored(self):
        validator = LeadValidator(US_LOCALE)
        self.assertEqual(validator.config['min_location_length'], 1)


if __name__ == "__main__":
    unittest.main()
