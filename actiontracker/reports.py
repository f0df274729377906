# Action Tracker Reports
# Workload aggregation: pivot tables and day-by-day buckets

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta

from .config import ADMIN_VIEW, HOURS_PER_DAY, LOOKAHEAD_DAYS, MINUTES_PER_HOUR
from .errors import InvalidInputError
from .helpers import date_range, format_date_display, parse_iso_date
from .records import get_date, get_minutes, get_text

# Row/column key for records with no value in a pivot dimension
BLANK = '(blank)'


@dataclass
class WorkloadTotals:
    """Summed minutes and item count, with hours and working days derived."""

    minutes: float = 0.0
    count: int = 0
    hours_per_day: float = field(default=HOURS_PER_DAY, repr=False, compare=False)

    def add(self, minutes, count=1):
        self.minutes += minutes
        self.count += count

    @property
    def hours(self):
        return self.minutes / MINUTES_PER_HOUR

    @property
    def days(self):
        return self.hours / self.hours_per_day

    def to_dict(self):
        return {
            'minutes': self.minutes,
            'count': self.count,
            'hours': self.hours,
            'days': self.days
        }


@dataclass
class PivotCell:
    minutes: float = 0.0
    count: int = 0

    def to_dict(self):
        return {'minutes': self.minutes, 'count': self.count}


@dataclass
class PivotResult:
    row_dimension: str
    col_dimension: str
    cells: dict
    row_keys: list
    col_keys: list
    hours_per_day: float = HOURS_PER_DAY

    def cell(self, row_key, col_key):
        return self.cells.get((row_key, col_key))

    def row_totals(self, row_key):
        return self._sum(cell for (row, _), cell in self.cells.items() if row == row_key)

    def column_totals(self, col_key):
        return self._sum(cell for (_, col), cell in self.cells.items() if col == col_key)

    def grand_totals(self):
        return self._sum(self.cells.values())

    def _sum(self, cells):
        totals = WorkloadTotals(hours_per_day=self.hours_per_day)
        for cell in cells:
            totals.add(cell.minutes, cell.count)
        return totals

    def to_dict(self):
        rows = []
        for row_key in self.row_keys:
            rows.append({
                'key': row_key,
                'cells': {
                    col_key: self.cells[(row_key, col_key)].to_dict()
                    for col_key in self.col_keys
                    if (row_key, col_key) in self.cells
                },
                'totals': self.row_totals(row_key).to_dict()
            })

        return {
            'rowDimension': self.row_dimension,
            'colDimension': self.col_dimension,
            'rowKeys': self.row_keys,
            'colKeys': self.col_keys,
            'rows': rows,
            'columnTotals': {col_key: self.column_totals(col_key).to_dict() for col_key in self.col_keys},
            'grandTotal': self.grand_totals().to_dict(),
            'hoursPerDay': self.hours_per_day
        }


@dataclass
class DayBucket:
    day: date
    totals: WorkloadTotals

    def to_dict(self):
        iso = self.day.isoformat()
        return {
            'date': iso,
            'label': format_date_display(iso),
            'weekday': self.day.strftime('%a'),
            **self.totals.to_dict()
        }


@dataclass
class DaywiseResult:
    start: date
    end: date
    buckets: list
    total: WorkloadTotals

    def to_dict(self):
        return {
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'days': [bucket.to_dict() for bucket in self.buckets],
            'total': self.total.to_dict()
        }


# ===================
# VALIDATION
# ===================

def _check_records(records):
    if not isinstance(records, (list, tuple)):
        raise InvalidInputError(f'records must be a list, got {type(records).__name__}')
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise InvalidInputError(f'records[{index}] must be a mapping, got {type(record).__name__}')


def _check_key(key, name, required=True):
    if key is None and not required:
        return
    if not isinstance(key, str) or not key:
        raise InvalidInputError(f'{name} must be a non-empty field name, got {key!r}')


def _hours_per_day(value):
    if value is None:
        return HOURS_PER_DAY
    if (isinstance(value, bool) or not isinstance(value, (int, float))
            or not math.isfinite(value) or value <= 0):
        raise InvalidInputError(f'hours_per_day must be a positive number, got {value!r}')
    return float(value)


# ===================
# AGGREGATION
# ===================

def dimension_value(record, key):
    """Pivot key for a record: its field text, or BLANK when empty."""
    return get_text(record, key) or BLANK


def build_pivot(records, row_key, col_key, minutes_key=None, hours_per_day=None):
    """Group records by two dimensions, summing minutes and counting items.

    Every record lands in exactly one cell. Row and column keys are sorted as
    plain strings, so '10' sorts before '2'.
    """
    _check_records(records)
    _check_key(row_key, 'row_key')
    _check_key(col_key, 'col_key')
    _check_key(minutes_key, 'minutes_key', required=False)
    hours_per_day = _hours_per_day(hours_per_day)

    cells = {}
    for record in records:
        coordinates = (dimension_value(record, row_key), dimension_value(record, col_key))
        cell = cells.setdefault(coordinates, PivotCell())
        cell.minutes += get_minutes(record, minutes_key)
        cell.count += 1

    return PivotResult(
        row_dimension=row_key,
        col_dimension=col_key,
        cells=cells,
        row_keys=sorted({row for row, _ in cells}),
        col_keys=sorted({col for _, col in cells}),
        hours_per_day=hours_per_day
    )


def resolve_window(start_date=None, end_date=None, today=None):
    """Date window for day-wise reports.

    No dates means today through today + LOOKAHEAD_DAYS. A missing start
    defaults to today and a missing end to start + LOOKAHEAD_DAYS.
    """
    today = parse_iso_date(today, 'today') if today is not None else date.today()
    start = parse_iso_date(start_date, 'start_date') if start_date not in (None, '') else today
    if end_date in (None, ''):
        end = start + timedelta(days=LOOKAHEAD_DAYS)
    else:
        end = parse_iso_date(end_date, 'end_date')
    if end < start:
        raise InvalidInputError(f'end_date {end.isoformat()} is before start_date {start.isoformat()}')
    return start, end


def build_daywise(records, start_date=None, end_date=None, owner=None,
                  deadline_key='deadline', minutes_key='min', owner_key='owner',
                  today=None, hours_per_day=None):
    """One bucket per calendar day in the window, including empty days.

    Records are matched on the calendar date of their deadline, ignoring any
    time of day. Owner '' / None / Admin means everyone.
    """
    _check_records(records)
    _check_key(deadline_key, 'deadline_key')
    _check_key(minutes_key, 'minutes_key', required=False)
    _check_key(owner_key, 'owner_key', required=False)
    hours_per_day = _hours_per_day(hours_per_day)
    start, end = resolve_window(start_date, end_date, today)

    buckets = {day: WorkloadTotals(hours_per_day=hours_per_day) for day in date_range(start, end)}
    owner_filter = owner if owner not in (None, '', ADMIN_VIEW) else None

    for record in records:
        if owner_filter is not None and get_text(record, owner_key) != owner_filter:
            continue
        day = get_date(record, deadline_key)
        if day in buckets:
            buckets[day].add(get_minutes(record, minutes_key))

    total = WorkloadTotals(hours_per_day=hours_per_day)
    for totals in buckets.values():
        total.add(totals.minutes, totals.count)

    return DaywiseResult(
        start=start,
        end=end,
        buckets=[DayBucket(day=day, totals=buckets[day]) for day in sorted(buckets)],
        total=total
    )


def workload_totals(records, minutes_key=None, hours_per_day=None):
    """Count, minutes, hours and days over a set of records."""
    _check_records(records)
    totals = WorkloadTotals(hours_per_day=_hours_per_day(hours_per_day))
    for record in records:
        totals.add(get_minutes(record, minutes_key))
    return totals
