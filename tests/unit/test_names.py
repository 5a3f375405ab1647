"""
Unit tests for name decomposition.
"""

import unittest

from bark_lead_decoder.decoder.names import clean_name, parse_full_name, resolve_name
from bark_lead_decoder.models.lead import PersonName


class TestParseFullName(unittest.TestCase):
    """Test parse_full_name."""

    def test_first_and_last(self):
        self.assertEqual(parse_full_name("Sarah Thompson"), PersonName(first_name="Sarah", last_name="Thompson"))

    def test_honorific_and_suffix_are_stripped(self):
        name = parse_full_name("Dr. John A. Smith Ltd")
        self.assertEqual(name.first_name, "John")
        self.assertEqual(name.last_name, "A. Smith")

    def test_multiple_last_name_tokens(self):
        name = parse_full_name("Maria de la Cruz")
        self.assertEqual(name.first_name, "Maria")
        self.assertEqual(name.last_name, "de la Cruz")

    def test_single_token(self):
        name = parse_full_name("Cher")
        self.assertEqual(name.first_name, "Cher")
        self.assertEqual(name.last_name, "Provider")

    def test_nothing_left(self):
        for value in ("", "   ", None, "Mr. Ltd"):
            with self.subTest(value=value):
                name = parse_full_name(value)
                self.assertTrue(name.is_default)
                self.assertEqual(str(name), "Unknown Provider")

    def test_clean_name(self):
        self.assertEqual(clean_name("Mrs Jane Doe Services"), "Jane Doe")
        self.assertEqual(clean_name("Prof. Ada Lovelace Inc."), "Ada Lovelace")


class TestResolveName(unittest.TestCase):
    """Test combining explicit name markers with full names."""

    def test_explicit_parts_win(self):
        name = resolve_name("Ann", "Lee", "Someone Else")
        self.assertEqual((name.first_name, name.last_name), ("Ann", "Lee"))

    def test_full_name_fills_missing_part(self):
        name = resolve_name("Ann", None, "Annie Lee-Smith")
        self.assertEqual((name.first_name, name.last_name), ("Ann", "Lee-Smith"))

    def test_full_name_only(self):
        name = resolve_name(None, "  ", "Bo Chan")
        self.assertEqual((name.first_name, name.last_name), ("Bo", "Chan"))

    def test_nothing_found(self):
        self.assertTrue(resolve_name(None, None, None).is_default)


if __name__ == "__main__":
    unittest.main()
