# Action Tracker Filters
# Predicate filtering and sorting over normalized records

from dataclasses import dataclass

from .errors import InvalidInputError
from .helpers import parse_iso_date
from .records import get_text, get_value

EQUALS = 'equals'
CONTAINS = 'contains'
DATE_FROM = 'date_from'
DATE_TO = 'date_to'
PRESENT = 'present'


@dataclass(frozen=True)
class Predicate:
    """One optional condition on one field.

    A predicate without a value (or without a field, when the column is not in
    the schema) is unset and lets every record through. A set predicate fails
    records that are missing the field.
    """

    field: str
    kind: str
    value: object = None

    @property
    def is_set(self):
        if not self.field:
            return False
        if self.kind == PRESENT:
            return True
        return self.value not in (None, '')

    def matches(self, record):
        if not self.is_set:
            return True

        if get_value(record, self.field) is None:
            return False
        text = get_text(record, self.field)

        if self.kind == EQUALS:
            return text == str(self.value)
        if self.kind == CONTAINS:
            return str(self.value).lower() in text.lower()
        # ISO dates order correctly as plain strings
        if self.kind == DATE_FROM:
            return text != '' and text >= self.value
        if self.kind == DATE_TO:
            return text != '' and text <= self.value
        if self.kind == PRESENT:
            return text != ''
        raise InvalidInputError(f'unknown predicate kind {self.kind!r}')


def equals(field, value):
    return Predicate(field, EQUALS, value)


def contains(field, needle):
    return Predicate(field, CONTAINS, needle)


def date_from(field, bound):
    return Predicate(field, DATE_FROM, _date_bound(bound, 'date_from'))


def date_to(field, bound):
    return Predicate(field, DATE_TO, _date_bound(bound, 'date_to'))


def require_field(field):
    return Predicate(field, PRESENT)


def _date_bound(bound, name):
    if bound in (None, ''):
        return None
    return parse_iso_date(bound, name).isoformat()


def filter_records(records, predicates=()):
    """Records matching every predicate, in their original order."""
    if not isinstance(records, (list, tuple)):
        raise InvalidInputError(f'records must be a list, got {type(records).__name__}')
    active = [predicate for predicate in predicates if predicate.is_set]
    return [record for record in records if all(p.matches(record) for p in active)]


def sort_records(records, key=None, descending=False):
    """Stable sort by the field's text value; missing values sort as ''."""
    if not key:
        return list(records)
    return sorted(records, key=lambda record: get_text(record, key), reverse=descending)
