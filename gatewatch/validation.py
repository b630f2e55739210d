"""
Input validation for user-supplied identifiers.

Everything here runs before any I/O; failures raise ValidationError.
"""

import re
from datetime import date, datetime
from typing import Any, Tuple

from gatewatch.errors import ValidationError

# AA123 or AA 123
FLIGHT_NUMBER_PATTERN = re.compile(r'[A-Z]{2}\s?\d{1,4}')

# IATA airport code, e.g. JFK
AIRPORT_CODE_PATTERN = re.compile(r'[A-Z]{3}')

DATE_FORMAT = '%Y-%m-%d'


def validate_flight_number(value: Any) -> str:
    """
    Validate a flight number and return it without the optional space.

    'AA 123' and 'AA123' both normalize to 'AA123' so they share a flight key.
    """
    if not isinstance(value, str) or not FLIGHT_NUMBER_PATTERN.fullmatch(value):
        raise ValidationError(f'Invalid flight number: {value!r}')
    return re.sub(r'\s+', '', value)


def airline_code_of(flight_number: str) -> str:
    """Two-letter airline prefix of a validated flight number."""
    return flight_number[:2]


def validate_airport_code(value: Any) -> str:
    if not isinstance(value, str) or not AIRPORT_CODE_PATTERN.fullmatch(value):
        raise ValidationError(f'Invalid airport code: {value!r}')
    return value


def parse_date(value: Any) -> date:
    """Parse a YYYY-MM-DD calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f'Invalid date: {value!r}')
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f'Invalid date (expected YYYY-MM-DD): {value!r}')


def validate_coordinates(latitude: Any, longitude: Any) -> Tuple[float, float]:
    """Check WGS84 bounds and return the pair as floats."""
    for name, value in (('latitude', latitude), ('longitude', longitude)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f'{name} must be a number')

    if not -90 <= latitude <= 90:
        raise ValidationError(f'latitude out of range: {latitude}')
    if not -180 <= longitude <= 180:
        raise ValidationError(f'longitude out of range: {longitude}')

    return float(latitude), float(longitude)
