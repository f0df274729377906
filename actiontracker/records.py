# Action Tracker Records
# Row normalization, typed accessors and column lookups
#
# A record is a plain dict of field key -> value, where after normalization
# every value is None, a bool/int/float/str, or a list of those.

import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time

from .errors import InvalidInputError
from .helpers import calendar_date, normalize_label, parse_number

# Fields never offered as pivot dimensions
NON_DIMENSION_KEYS = ('id', 'actions')


@dataclass(frozen=True)
class Column:
    """Column descriptor: field key plus display label."""

    key: str
    label: str

    def to_dict(self):
        return {'key': self.key, 'label': self.label}


def columns_from_payload(payload):
    """Build Column descriptors from a list of {key, label} dicts."""
    if not isinstance(payload, (list, tuple)):
        raise InvalidInputError('columns must be a list of {key, label} objects')

    columns = []
    for index, item in enumerate(payload):
        if isinstance(item, Column):
            columns.append(item)
            continue
        if not isinstance(item, Mapping) or not item.get('key'):
            raise InvalidInputError(f'columns[{index}] must be an object with a key')
        key = str(item['key'])
        columns.append(Column(key=key, label=str(item.get('label') or key.upper())))
    return columns


# ===================
# NORMALIZATION
# ===================

def normalize_value(value):
    """Unwrap a single warehouse cell value.

    {'value': x} wrappers are replaced by x (recursively), lists are unwrapped
    element by element, dates become ISO strings and any other object is
    serialized to a string.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        if 'value' in value:
            return normalize_value(value['value'])
        try:
            return json.dumps(value, sort_keys=True, default=str)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, (list, tuple)):
        return [normalize_value(item) for item in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def normalize_row(row):
    """Return a copy of row with every value unwrapped."""
    if not isinstance(row, Mapping):
        raise InvalidInputError(f'row must be a mapping, got {type(row).__name__}')
    return {key: normalize_value(value) for key, value in row.items()}


def normalize_rows(rows):
    if not isinstance(rows, (list, tuple)):
        raise InvalidInputError(f'rows must be a list, got {type(rows).__name__}')
    normalized = []
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidInputError(f'rows[{index}] must be a mapping, got {type(row).__name__}')
        normalized.append(normalize_row(row))
    return normalized


# ===================
# ACCESSORS
# ===================

def get_value(record, key):
    return record.get(key) if key else None


def get_text(record, key):
    """Field value as display text; missing values read as ''."""
    value = get_value(record, key)
    if value is None:
        return ''
    if isinstance(value, list):
        return ', '.join(_scalar_text(item) for item in value)
    return _scalar_text(value)


def _scalar_text(value):
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_minutes(record, key):
    return parse_number(get_value(record, key))


def get_date(record, key):
    return calendar_date(get_value(record, key))


# ===================
# COLUMN LOOKUPS
# ===================

def find_column_key(columns, name):
    """Find the key of the column whose label (or key) matches name.

    Matching ignores case and punctuation. An exact match wins; otherwise the
    first column whose label contains name is used.
    """
    wanted = normalize_label(name)
    if not wanted:
        return None

    labels = [(column, normalize_label(column.label or column.key)) for column in columns]
    for column, label in labels:
        if label == wanted or normalize_label(column.key) == wanted:
            return column.key
    for column, label in labels:
        if wanted in label:
            return column.key
    return None


def available_dimensions(columns, minutes_key=None, deadline_key=None):
    """Columns that can be used as pivot rows/columns."""
    excluded = set(NON_DIMENSION_KEYS) | {minutes_key, deadline_key}
    return [column for column in columns if column.key not in excluded]


def distinct_values(records, key):
    """Sorted distinct non-empty values of a field."""
    return sorted({get_text(record, key) for record in records} - {''})
