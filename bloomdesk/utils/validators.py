"""
Input Validation Utilities

FLOW OVERVIEW
- InputValidator.validate_*(value)
  • Field-level checks returning ValidationResult with a normalized sanitized_value
    (lowercased email, formatted phone, @-prefixed instagram, parsed date, ...).
- sanitize_input(input, max_length)
  • Trim, bound length, normalize, and remove null bytes.
- clean_*_payload(data, partial)
  • Validate a JSON body for one resource; returns the cleaned fields or raises
    ValidationError whose details map field -> message.
"""

import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, Optional

from ..models.project import TRANSPORT_METHODS, SERVICE_LEVELS, TOGGLEABLE_FIELDS, QUALITY_STATUSES
from ..models.studio import VISIBILITIES
from .error_handlers import ValidationError

# Largest value an INTEGER column accepts on every supported backend
MAX_INTEGER = 2 ** 31 - 1


@dataclass
class ValidationResult:
    """Result of validation operation"""
    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[Any] = None


class InputValidator:
    """Field validators shared by the API blueprints"""

    # Simplified RFC 5322 syntax
    EMAIL_PATTERN = re.compile(
        r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$'
    )

    URL_PATTERN = re.compile(r'^https?://[^\s/$.?#][^\s]*$', re.IGNORECASE)

    INSTAGRAM_PATTERN = re.compile(r'^@[A-Za-z0-9._]{1,30}$')

    @classmethod
    def validate_email(cls, email: str) -> ValidationResult:
        """
        Validate email address

        Args:
            email: Email address to validate

        Returns:
            ValidationResult with the lowercased address
        """
        if not email or not isinstance(email, str):
            return ValidationResult(False, "Email must be a non-empty string")

        email = email.strip()
        if email == "":
            return ValidationResult(False, "Email cannot be empty")

        if len(email) > 254:
            return ValidationResult(False, "Email address too long (max 254 characters)")

        if not cls.EMAIL_PATTERN.match(email):
            return ValidationResult(False, "Invalid email format")

        local_part, domain = email.split('@')
        if len(local_part) > 64:
            return ValidationResult(False, "Email local part too long (max 64 characters)")

        if local_part.startswith('.') or local_part.endswith('.') or '..' in local_part:
            return ValidationResult(False, "Invalid email format")

        return ValidationResult(True, sanitized_value=email.lower())

    @classmethod
    def validate_phone(cls, phone: str) -> ValidationResult:
        """
        Validate a North American phone number and format it as (555) 123-4567

        A leading country code 1 is dropped. An empty value clears the phone.
        """
        if phone is None or (isinstance(phone, str) and phone.strip() == ""):
            return ValidationResult(True, sanitized_value='')
        if not isinstance(phone, str):
            return ValidationResult(False, "Phone must be a string")

        digits = re.sub(r'\D', '', phone)
        if len(digits) == 11 and digits.startswith('1'):
            digits = digits[1:]
        if len(digits) != 10:
            return ValidationResult(False, "Enter a valid 10-digit phone number")

        return ValidationResult(True, sanitized_value=f'({digits[:3]}) {digits[3:6]}-{digits[6:]}')

    @classmethod
    def validate_url(cls, url: str, field: str = 'URL') -> ValidationResult:
        """Validate an http(s) URL; empty clears the value"""
        if url is None or (isinstance(url, str) and url.strip() == ""):
            return ValidationResult(True, sanitized_value=None)
        if not isinstance(url, str):
            return ValidationResult(False, f"{field} must be a string")

        url = url.strip()
        if len(url) > 1024:
            return ValidationResult(False, f"{field} too long (max 1024 characters)")
        if not cls.URL_PATTERN.match(url):
            return ValidationResult(False, f"{field} must start with http:// or https://")
        return ValidationResult(True, sanitized_value=url)

    @classmethod
    def validate_instagram(cls, handle: str) -> ValidationResult:
        """Normalize an Instagram handle to start with @"""
        if handle is None or (isinstance(handle, str) and handle.strip() == ""):
            return ValidationResult(True, sanitized_value=None)
        if not isinstance(handle, str):
            return ValidationResult(False, "Instagram handle must be a string")

        handle = handle.strip()
        if not handle.startswith('@'):
            handle = f'@{handle}'
        if not cls.INSTAGRAM_PATTERN.match(handle):
            return ValidationResult(False, "Invalid Instagram handle")
        return ValidationResult(True, sanitized_value=handle)

    @classmethod
    def validate_required_text(cls, value: str, field: str, max_length: int = 255) -> ValidationResult:
        """Non-empty text after trimming"""
        if not isinstance(value, str) or value.strip() == "":
            return ValidationResult(False, f"{field} is required")
        return ValidationResult(True, sanitized_value=sanitize_input(value, max_length))

    @classmethod
    def validate_date(cls, value: str, field: str = 'Date') -> ValidationResult:
        """Parse an ISO date (YYYY-MM-DD)"""
        if isinstance(value, date):
            return ValidationResult(True, sanitized_value=value)
        if not value or not isinstance(value, str):
            return ValidationResult(False, f"{field} is required")
        try:
            parsed = date.fromisoformat(value.strip()[:10])
        except ValueError:
            return ValidationResult(False, f"{field} must be an ISO date (YYYY-MM-DD)")
        return ValidationResult(True, sanitized_value=parsed)

    @classmethod
    def validate_number(cls, value: Any, field: str, minimum: float = 0,
                        integer: bool = False) -> ValidationResult:
        """Numeric value no smaller than minimum; integer=True rejects fractions"""
        if isinstance(value, bool) or value is None or value == '':
            return ValidationResult(False, f"{field} must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return ValidationResult(False, f"{field} must be a number")
        if not math.isfinite(number):
            return ValidationResult(False, f"{field} must be a number")
        if integer:
            if not number.is_integer():
                return ValidationResult(False, f"{field} must be a whole number")
            number = int(number)
            if number > MAX_INTEGER:
                return ValidationResult(False, f"{field} is too large")
        if number < minimum:
            return ValidationResult(False, f"{field} must be at least {minimum:g}")
        return ValidationResult(True, sanitized_value=number)

    @classmethod
    def validate_choice(cls, value: Any, choices: Iterable[str], field: str) -> ValidationResult:
        choices = tuple(choices)
        if value not in choices:
            return ValidationResult(False, f"{field} must be one of: {', '.join(choices)}")
        return ValidationResult(True, sanitized_value=value)

    @classmethod
    def validate_service_level(cls, value: Any) -> ValidationResult:
        """List of service levels, de-duplicated in catalogue order"""
        if not isinstance(value, list):
            return ValidationResult(False, "Service level must be a list")
        unknown = [v for v in value if v not in SERVICE_LEVELS]
        if unknown:
            return ValidationResult(False, f"Unknown service level: {', '.join(map(str, unknown))}")
        return ValidationResult(True, sanitized_value=[s for s in SERVICE_LEVELS if s in value])

    @classmethod
    def validate_field_visibility(cls, value: Any) -> ValidationResult:
        if not isinstance(value, dict):
            return ValidationResult(False, "Field visibility must be an object")
        unknown = [k for k in value if k not in TOGGLEABLE_FIELDS]
        if unknown:
            return ValidationResult(False, f"Unknown fields: {', '.join(unknown)}")
        if not all(isinstance(v, bool) for v in value.values()):
            return ValidationResult(False, "Field visibility values must be true or false")
        return ValidationResult(True, sanitized_value=dict(value))

    @classmethod
    def sanitize_input(cls, input_string: str, max_length: int = 1000) -> str:
        """
        Sanitize free text

        Args:
            input_string: Input string to sanitize
            max_length: Maximum allowed length

        Returns:
            Sanitized string
        """
        if not input_string:
            return ""

        sanitized = str(input_string).strip()

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length]

        # Remove null bytes
        sanitized = sanitized.replace('\x00', '')

        # Normalize line endings
        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        return sanitized


# Convenience functions for common validations
def validate_email(email: str) -> ValidationResult:
    """Validate email address"""
    return InputValidator.validate_email(email)


def validate_phone(phone: str) -> ValidationResult:
    """Validate and format phone number"""
    return InputValidator.validate_phone(phone)


def sanitize_input(input_string: str, max_length: int = 1000) -> str:
    """Sanitize user input"""
    return InputValidator.sanitize_input(input_string, max_length)


class _Collector:
    """Accumulates field errors and cleaned values while checking a payload"""

    def __init__(self, data, partial):
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')
        self.data = data
        self.partial = partial
        self.cleaned: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}

    def wants(self, field, required=False):
        """True when the field should be checked; records missing required fields"""
        if field in self.data:
            return True
        if required and not self.partial:
            self.errors[field] = f"{field} is required"
        return False

    def apply(self, field, result: ValidationResult):
        if result.is_valid:
            self.cleaned[field] = result.sanitized_value
        else:
            self.errors[field] = result.error_message

    def text(self, field, max_length=1000):
        if self.wants(field):
            self.cleaned[field] = sanitize_input(self.data[field] or '', max_length)

    def finish(self, message):
        if self.errors:
            raise ValidationError(message, details=self.errors)
        return self.cleaned


def clean_project_payload(data, partial=False, current_start=None, current_end=None):
    """
    Validate a project create/update body.

    On create, date_end defaults to date_start. On update, the date range is
    checked against whichever side is not being changed.
    """
    c = _Collector(data, partial)

    if c.wants('event_name', required=True):
        c.apply('event_name', InputValidator.validate_required_text(data['event_name'], 'Event name', 200))
    if c.wants('date_start', required=True):
        c.apply('date_start', InputValidator.validate_date(data['date_start'], 'Start date'))
    if 'date_end' in data and data['date_end'] not in (None, ''):
        c.apply('date_end', InputValidator.validate_date(data['date_end'], 'End date'))
    elif not partial and 'date_start' in c.cleaned:
        c.cleaned['date_end'] = c.cleaned['date_start']

    start = c.cleaned.get('date_start', current_start)
    end = c.cleaned.get('date_end', current_end)
    if start and end and end < start and 'date_start' not in c.errors and 'date_end' not in c.errors:
        c.errors['date_end'] = "End date cannot be before start date"

    for field in ('timeline', 'description', 'design_guide'):
        c.text(field, 5000)
    c.text('location', 255)
    c.text('day_of_contact', 255)

    if c.wants('pay'):
        c.apply('pay', InputValidator.validate_number(data['pay'], 'Pay'))
    if c.wants('total_hours'):
        c.apply('total_hours', InputValidator.validate_number(data['total_hours'], 'Total hours'))
    if c.wants('designers_needed'):
        c.apply('designers_needed', InputValidator.validate_number(
            data['designers_needed'], 'Designers needed', minimum=1, integer=True))
    if c.wants('transport_method'):
        c.apply('transport_method', InputValidator.validate_choice(
            data['transport_method'], TRANSPORT_METHODS, 'Transport method'))
    if c.wants('service_level'):
        c.apply('service_level', InputValidator.validate_service_level(data['service_level']))
    if c.wants('field_visibility'):
        c.apply('field_visibility', InputValidator.validate_field_visibility(data['field_visibility']))

    return c.finish('Invalid project')


def clean_floral_item_payload(data, partial=False):
    c = _Collector(data, partial)
    if c.wants('name', required=True):
        c.apply('name', InputValidator.validate_required_text(data['name'], 'Name', 200))
    if c.wants('quantity'):
        c.apply('quantity', InputValidator.validate_number(data['quantity'], 'Quantity', minimum=1, integer=True))
    return c.finish('Invalid floral item')


def clean_flower_row_payload(data, partial=False):
    c = _Collector(data, partial)
    if c.wants('flower', required=True):
        c.apply('flower', InputValidator.validate_required_text(data['flower'], 'Flower', 120))
    c.text('color', 60)
    for field, label in (('stems_in_recipe', 'Stems in recipe'), ('total_ordered', 'Total ordered'),
                         ('extras', 'Extras')):
        if c.wants(field):
            c.apply(field, InputValidator.validate_number(data[field], label, integer=True))
    return c.finish('Invalid flower row')


def clean_hard_good_row_payload(data, partial=False):
    c = _Collector(data, partial)
    if c.wants('item', required=True):
        c.apply('item', InputValidator.validate_required_text(data['item'], 'Item', 200))
    if c.wants('quantity'):
        c.apply('quantity', InputValidator.validate_number(data['quantity'], 'Quantity', integer=True))
    return c.finish('Invalid hard good row')


def clean_profile_payload(data):
    c = _Collector(data, partial=True)
    if c.wants('first_name'):
        c.apply('first_name', InputValidator.validate_required_text(data['first_name'], 'First name', 80))
    if c.wants('last_name'):
        c.apply('last_name', InputValidator.validate_required_text(data['last_name'], 'Last name', 80))
    if c.wants('phone'):
        c.apply('phone', InputValidator.validate_phone(data['phone']))
    c.text('address', 255)
    if c.wants('avatar_url'):
        c.apply('avatar_url', InputValidator.validate_url(data['avatar_url'], 'Avatar URL'))
    if c.wants('website'):
        c.apply('website', InputValidator.validate_url(data['website'], 'Website'))
    if c.wants('instagram'):
        c.apply('instagram', InputValidator.validate_instagram(data['instagram']))
    return c.finish('Invalid profile')


def clean_studio_payload(data, partial=False):
    c = _Collector(data, partial)
    if c.wants('name', required=True):
        c.apply('name', InputValidator.validate_required_text(data['name'], 'Studio name', 120))
    if c.wants('logo_url'):
        c.apply('logo_url', InputValidator.validate_url(data['logo_url'], 'Logo URL'))
    c.text('description', 2000)
    if c.wants('visibility'):
        c.apply('visibility', InputValidator.validate_choice(data['visibility'], VISIBILITIES, 'Visibility'))
    if c.wants('onboarding_completed'):
        if isinstance(data['onboarding_completed'], bool):
            c.cleaned['onboarding_completed'] = data['onboarding_completed']
        else:
            c.errors['onboarding_completed'] = "onboarding_completed must be true or false"
    return c.finish('Invalid studio')


def clean_quality_payload(data):
    c = _Collector(data, partial=False)
    if c.wants('status', required=True):
        c.apply('status', InputValidator.validate_choice(data['status'], QUALITY_STATUSES, 'Quality status'))
    note = sanitize_input(data.get('note') or '', 2000)
    if c.cleaned.get('status') == 'issue' and not note:
        c.errors['note'] = "Please describe the quality issue"
    c.cleaned['note'] = note or None
    return c.finish('Invalid quality check')


def require_photo_url(data, field='photo_url'):
    """Return the validated photo URL of a JSON body or raise ValidationError"""
    value = (data or {}).get(field) if isinstance(data, dict) else None
    result = InputValidator.validate_url(value, 'Photo URL')
    if not result.is_valid:
        raise ValidationError(result.error_message, details={field: result.error_message})
    if not result.sanitized_value:
        raise ValidationError('Photo URL is required', details={field: 'Photo URL is required'})
    return result.sanitized_value
