"""
Tests for Input Validation Utilities

Field validators and the payload cleaners used by the API blueprints.
"""

from datetime import date

import pytest

from bloomdesk.utils.error_handlers import ValidationError
from bloomdesk.utils.validators import (
    InputValidator, validate_email, validate_phone, sanitize_input,
    clean_project_payload, clean_profile_payload, clean_studio_payload, clean_quality_payload,
    clean_floral_item_payload, require_photo_url
)


class TestEmailValidation:
    """Test email validation"""

    def test_valid_emails_are_lowercased(self):
        for email in ['test@example.com', 'User.Name@Domain.co.uk', 'user+tag@example.org', 'a@b.c']:
            result = validate_email(email)
            assert result.is_valid, f"Email '{email}' should be valid: {result.error_message}"
            assert result.sanitized_value == email.lower()

    def test_invalid_emails(self):
        for email in ['', '   ', 'invalid-email', '@example.com', 'user@', 'user@localhost',
                      'user name@example.com', '.user@example.com', 'user..name@example.com', None]:
            assert not validate_email(email).is_valid, f"Email '{email}' should be invalid"


class TestPhoneValidation:
    """Test phone formatting"""

    def test_formats_ten_digits(self):
        for raw in ['5551234567', '555-123-4567', '(555) 123 4567', '+1 555 123 4567']:
            result = validate_phone(raw)
            assert result.is_valid
            assert result.sanitized_value == '(555) 123-4567'

    def test_rejects_short_numbers(self):
        result = validate_phone('555-1234')
        assert not result.is_valid
        assert '10-digit' in result.error_message

    def test_empty_clears(self):
        assert validate_phone('').sanitized_value == ''


class TestUrlAndInstagram:
    """Test website and instagram normalization"""

    def test_url_requires_http_scheme(self):
        assert InputValidator.validate_url('https://bloom.example.com/shop').is_valid
        assert not InputValidator.validate_url('ftp://bloom.example.com').is_valid
        assert not InputValidator.validate_url('bloom.example.com').is_valid
        assert InputValidator.validate_url('').sanitized_value is None

    def test_instagram_gets_at_prefix(self):
        assert InputValidator.validate_instagram('petalstudio').sanitized_value == '@petalstudio'
        assert InputValidator.validate_instagram('@petal.studio').sanitized_value == '@petal.studio'
        assert not InputValidator.validate_instagram('has space').is_valid


class TestNumberValidation:
    """Test numeric bounds"""

    def test_accepts_numeric_strings(self):
        assert InputValidator.validate_number('12.5', 'Pay').sanitized_value == 12.5
        assert InputValidator.validate_number('4', 'Quantity', integer=True).sanitized_value == 4

    def test_rejects_non_finite(self):
        for value in ('nan', 'inf', '-inf', float('nan'), float('inf')):
            assert not InputValidator.validate_number(value, 'Pay').is_valid

    def test_rejects_integers_too_large_for_a_column(self):
        result = InputValidator.validate_number(10 ** 30, 'Quantity', integer=True)
        assert not result.is_valid
        assert result.error_message == 'Quantity is too large'
        assert InputValidator.validate_number(2 ** 31 - 1, 'Quantity', integer=True).is_valid

    def test_rejects_ints_too_large_for_float(self):
        assert not InputValidator.validate_number(10 ** 400, 'Pay').is_valid


class TestSanitizeInput:
    """Test free text sanitization"""

    def test_trims_and_strips_null_bytes(self):
        assert sanitize_input('  hello\x00 world \r\n') == 'hello world'

    def test_bounds_length(self):
        assert len(sanitize_input('x' * 50, max_length=10)) == 10


class TestProjectPayload:
    """Test project create/update validation"""

    def test_minimal_create_defaults_end_date(self):
        cleaned = clean_project_payload({'event_name': ' Gala ', 'date_start': '2026-07-01'})
        assert cleaned['event_name'] == 'Gala'
        assert cleaned['date_start'] == date(2026, 7, 1)
        assert cleaned['date_end'] == date(2026, 7, 1)

    def test_missing_required_fields(self):
        with pytest.raises(ValidationError) as exc:
            clean_project_payload({})
        assert set(exc.value.details) == {'event_name', 'date_start'}

    def test_end_before_start(self):
        with pytest.raises(ValidationError) as exc:
            clean_project_payload({'event_name': 'Gala', 'date_start': '2026-07-02', 'date_end': '2026-07-01'})
        assert 'date_end' in exc.value.details

    def test_partial_update_checks_against_current_dates(self):
        with pytest.raises(ValidationError):
            clean_project_payload({'date_end': '2026-06-30'}, partial=True,
                                  current_start=date(2026, 7, 1), current_end=date(2026, 7, 1))
        cleaned = clean_project_payload({'pay': '250.5'}, partial=True)
        assert cleaned == {'pay': 250.5}

    def test_numeric_and_enum_rules(self):
        with pytest.raises(ValidationError) as exc:
            clean_project_payload({
                'event_name': 'Gala', 'date_start': '2026-07-01',
                'pay': -1, 'designers_needed': 0, 'transport_method': 'bicycle',
                'service_level': ['design', 'juggling'], 'field_visibility': {'secret': False},
            })
        assert set(exc.value.details) == {
            'pay', 'designers_needed', 'transport_method', 'service_level', 'field_visibility'
        }

    def test_service_level_is_deduplicated_in_catalogue_order(self):
        cleaned = clean_project_payload({'service_level': ['strike', 'design', 'design']}, partial=True)
        assert cleaned['service_level'] == ['design', 'strike']


class TestOtherPayloads:
    """Test profile, studio, floral item and quality payloads"""

    def test_profile(self):
        cleaned = clean_profile_payload({'phone': '555.123.4567', 'instagram': 'fern', 'address': ' 1 Main '})
        assert cleaned == {'phone': '(555) 123-4567', 'instagram': '@fern', 'address': '1 Main'}

    def test_profile_rejects_blank_name(self):
        with pytest.raises(ValidationError) as exc:
            clean_profile_payload({'first_name': '  ', 'website': 'nope'})
        assert set(exc.value.details) == {'first_name', 'website'}

    def test_studio(self):
        assert clean_studio_payload({'visibility': 'open'}, partial=True) == {'visibility': 'open'}
        with pytest.raises(ValidationError):
            clean_studio_payload({'visibility': 'secret'}, partial=True)
        with pytest.raises(ValidationError):
            clean_studio_payload({})

    def test_floral_item_quantity(self):
        assert clean_floral_item_payload({'name': 'Arch', 'quantity': 2}) == {'name': 'Arch', 'quantity': 2}
        with pytest.raises(ValidationError):
            clean_floral_item_payload({'name': 'Arch', 'quantity': 0})

    def test_quality_issue_needs_note(self):
        with pytest.raises(ValidationError):
            clean_quality_payload({'status': 'issue'})
        assert clean_quality_payload({'status': 'good'}) == {'status': 'good', 'note': None}

    def test_photo_url(self):
        assert require_photo_url({'photo_url': 'https://cdn.example.com/a.jpg'}) == 'https://cdn.example.com/a.jpg'
        with pytest.raises(ValidationError):
            require_photo_url({})
