import pytest

from actiontracker.errors import InvalidInputError
from actiontracker.filters import (
    contains,
    date_from,
    date_to,
    equals,
    filter_records,
    require_field,
    sort_records,
)


def ids(records):
    return [record['id'] for record in records]


def test_no_predicates_returns_everything_in_order(action_items):
    assert filter_records(action_items) == action_items
    assert filter_records(action_items, [equals('owner', ''), contains('business', None)]) == action_items


def test_equality_is_exact_and_case_sensitive(action_items):
    assert ids(filter_records(action_items, [equals('owner', 'Dan')])) == ['1', '2']
    assert filter_records(action_items, [equals('owner', 'dan')]) == []


def test_substring_ignores_case(action_items):
    assert ids(filter_records(action_items, [contains('business', 'ACME')])) == ['1', '4']


def test_date_bounds_compare_iso_strings(action_items):
    predicates = [date_from('deadline', '2025-01-02'), date_to('deadline', '2025-01-03')]
    assert ids(filter_records(action_items, predicates)) == ['1', '2', '3']


def test_date_upper_bound_is_lexicographic():
    records = [{'id': 'a', 'deadline': '2025-01-02T10:00:00'}, {'id': 'b', 'deadline': '2025-01-02'}]
    assert ids(filter_records(records, [date_to('deadline', '2025-01-02')])) == ['b']


def test_missing_field_fails_set_predicate(action_items):
    assert ids(filter_records(action_items, [equals('business_type', 'External')])) == ['1', '3']
    records = [{'id': 'x'}, {'id': 'y', 'deadline': '2025-01-01'}]
    assert ids(filter_records(records, [date_from('deadline', '2024-12-31')])) == ['y']
    assert ids(filter_records(records, [require_field('deadline')])) == ['y']


def test_predicates_combine_as_conjunction(action_items):
    predicates = [equals('owner', 'Dan'), equals('business_type', 'Internal')]
    assert ids(filter_records(action_items, predicates)) == ['2']


def test_predicate_without_field_is_ignored(action_items):
    assert filter_records(action_items, [equals(None, 'Dan')]) == action_items


def test_bad_inputs_fail_fast(action_items):
    with pytest.raises(InvalidInputError, match='records must be a list'):
        filter_records('not records')
    with pytest.raises(InvalidInputError, match='date_from'):
        date_from('deadline', '02/01/2025')


def test_sort_is_stable_string_sort():
    records = [
        {'id': 'a', 'min': '2'},
        {'id': 'b', 'min': '10'},
        {'id': 'c'},
        {'id': 'd', 'min': '2'},
    ]
    assert ids(sort_records(records, 'min')) == ['c', 'b', 'a', 'd']
    assert ids(sort_records(records, 'min', descending=True)) == ['a', 'd', 'b', 'c']
    assert ids(sort_records(records, None)) == ['a', 'b', 'c', 'd']
