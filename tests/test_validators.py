"""Tests for shared validators and sanitization."""

import pytest

from moverhub.shared.validators import normalize_us_phone, validate_email, validate_time_slot
from moverhub.utils.sanitization import sanitize_string


class TestPhone:
    @pytest.mark.parametrize("raw", ["(512) 555-0142", "512.555.0142", "+1 512 555 0142"])
    def test_us_numbers_become_e164(self, raw):
        assert normalize_us_phone(raw) == "+15125550142"

    def test_other_numbers_kept(self):
        assert normalize_us_phone(" +44 20 7946 0958 ") == "+44 20 7946 0958"

    def test_empty(self):
        assert normalize_us_phone(None) is None


class TestEmail:
    def test_lowercased(self):
        assert validate_email(" Casey@Example.COM ") == "casey@example.com"

    def test_invalid(self):
        with pytest.raises(ValueError):
            validate_email("casey-at-example")


class TestTimeSlot:
    def test_normalized(self):
        assert validate_time_slot(" Morning ") == "morning"

    @pytest.mark.parametrize("value", ["evening", "", None])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            validate_time_slot(value)


class TestSanitize:
    def test_escapes_markup(self):
        assert sanitize_string("<b>Bob</b>") == "&lt;b&gt;Bob&lt;/b&gt;"

    def test_drops_control_characters(self):
        assert sanitize_string("Bob\x00\x07 Smith") == "Bob Smith"
