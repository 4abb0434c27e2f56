# /app/utils/validators.py
"""Request-body validation and allow-listed field merging.

Every entity accepts an explicit set of writable fields. Anything else in a
request body is rejected, so identifiers, owner references and the embedded
clinical history can never be overwritten by a generic update.
"""
import re
from datetime import date, datetime
from app.models.patient_models import CLINICAL_ENTRY_FIELDS, VITAL_SIGN_FIELDS
from app.utils.exceptions import ValidationError

# Short wire names accepted as input aliases for clinical entry fields
CLINICAL_FIELD_ALIASES = {
    'bph': 'blood_pressure_high',
    'bpl': 'blood_pressure_low',
    'rr': 'respiration_rate',
    'bol': 'blood_oxygen_level',
    'hbr': 'heart_beat_rate',
}


def require_json_object(data):
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def reject_unknown_fields(data, allowed):
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown or read-only fields: {', '.join(unknown)}")


def require_fields(data, required):
    missing = [field for field in required if data.get(field) in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def parse_string(value, field):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field}' must be a non-empty string")
    return value.strip()


def parse_optional_string(value, field):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    return value.strip() or None


def parse_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(f"'{field}' must be one of: {', '.join(choices)}")
    return value


def parse_int(value, field):
    """Accepts JSON integers, integral floats and digit strings."""
    if isinstance(value, bool):
        raise ValidationError(f"'{field}' must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"'{field}' must be an integer")


def _fromisoformat(value):
    # fromisoformat() only learned the 'Z' suffix in 3.11
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


def parse_timestamp(value, field):
    """Parses an ISO-8601 date or datetime and returns its normalized string form."""
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be an ISO-8601 date string")
    try:
        return _fromisoformat(value.strip()).isoformat()
    except ValueError:
        raise ValidationError(f"'{field}' must be an ISO-8601 date string")


def parse_date(value, field):
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be an ISO-8601 date string")
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return _fromisoformat(value).date()
    except ValueError:
        raise ValidationError(f"'{field}' must be an ISO-8601 date string")


def parse_index(raw):
    """Turns a path segment into a positional index; bounds are checked by the store."""
    if not isinstance(raw, str) or not re.fullmatch(r'-?\d+', raw):
        raise ValidationError('Clinical entry index must be an integer')
    return int(raw)


def _resolve_aliases(data):
    resolved = {}
    for key, value in data.items():
        field = CLINICAL_FIELD_ALIASES.get(key, key)
        if field in resolved:
            raise ValidationError(f"'{field}' supplied more than once")
        resolved[field] = value
    return resolved


def clean_clinical_entry(data, partial=False):
    """Validates a clinical entry body.

    With ``partial=False`` every field is required. With ``partial=True`` only
    the supplied fields are validated, but none of them may be null and at
    least one must be present.
    """
    data = _resolve_aliases(require_json_object(data))
    reject_unknown_fields(data, CLINICAL_ENTRY_FIELDS)

    if partial:
        if not data:
            raise ValidationError('No clinical entry fields supplied')
        nulls = [field for field in CLINICAL_ENTRY_FIELDS if field in data and data[field] is None]
        if nulls:
            raise ValidationError(f"Required fields cannot be cleared: {', '.join(nulls)}")
    else:
        require_fields(data, CLINICAL_ENTRY_FIELDS)

    cleaned = {}
    if 'date' in data:
        cleaned['date'] = parse_timestamp(data['date'], 'date')
    for field in VITAL_SIGN_FIELDS:
        if field in data:
            cleaned[field] = parse_int(data[field], field)
    return cleaned
