# Action Tracker Data Service
# Reads the action item snapshot from the Items API, falling back to bundled sample data

import logging
from dataclasses import dataclass, field

import httpx

from .config import ACTION_ITEMS_API_URL
from .errors import InvalidInputError
from .records import Column, columns_from_payload, normalize_rows

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = [
    Column('actions', 'ACTIONS'),
    Column('createDate', 'CREATE DATE'),
    Column('businessType', 'BUSINESS TYPE'),
    Column('business', 'BUSINESS'),
    Column('process', 'PROCESS'),
    Column('subType', 'SUB-TYPE'),
    Column('deliverable', 'DELIVERABLE'),
    Column('owner', 'OWNER'),
    Column('deadline', 'DEADLINE'),
    Column('min', 'MIN'),
    Column('priority', 'PRIORITY'),
    Column('status', 'STATUS')
]

SAMPLE_ITEMS = [
    {
        'id': '1', 'actions': 'View', 'createDate': '2025-06-01', 'businessType': 'External',
        'business': 'Acme Inc', 'process': 'Onboarding', 'subType': 'Contract',
        'deliverable': 'Signed Agreement', 'owner': 'Dan', 'deadline': '2025-12-31',
        'min': '30', 'priority': 'High', 'status': 'Open'
    },
    {
        'id': '2', 'actions': 'View', 'createDate': '2025-05-15', 'businessType': 'Internal',
        'business': 'Beta LLC', 'process': 'Billing', 'subType': 'Invoice',
        'deliverable': 'Invoice Sent', 'owner': 'Florence', 'deadline': '2025-11-20',
        'min': '15', 'priority': 'Medium', 'status': 'In Progress'
    },
    {
        'id': '3', 'actions': 'View', 'createDate': '2025-07-10', 'businessType': 'External',
        'business': 'Gamma Co', 'process': 'Launch', 'subType': 'Plan',
        'deliverable': 'Go-to-market', 'owner': 'Kams', 'deadline': '2026-01-15',
        'min': '60', 'priority': 'High', 'status': 'Open'
    },
    {
        'id': '4', 'actions': 'View', 'createDate': '2025-03-20', 'businessType': 'Internal',
        'business': 'Delta Ltd', 'process': 'Audit', 'subType': 'Site',
        'deliverable': 'Audit Report', 'owner': 'Sunny', 'deadline': '2025-10-05',
        'min': '45', 'priority': 'Low', 'status': 'Completed'
    },
    {
        'id': '5', 'actions': 'View', 'createDate': '2025-08-01', 'businessType': 'External',
        'business': 'Acme Inc', 'process': 'Customer Success', 'subType': 'Check-in',
        'deliverable': 'Call Notes', 'owner': 'Dan', 'deadline': '2025-09-30',
        'min': '20', 'priority': 'Medium', 'status': 'Open'
    }
]

SOURCE_API = 'api'
SOURCE_SAMPLE = 'sample'


@dataclass
class Snapshot:
    """Records plus the columns that describe them."""

    rows: list
    columns: list = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    source: str = SOURCE_API


def sample_snapshot():
    return Snapshot(rows=[dict(item) for item in SAMPLE_ITEMS], columns=list(DEFAULT_COLUMNS), source=SOURCE_SAMPLE)


def parse_payload(payload):
    """Turn an Items API payload into a Snapshot.

    Accepts {columns, rows} or a bare list of rows. Anything else is rejected.
    """
    if isinstance(payload, dict) and isinstance(payload.get('rows'), list):
        columns = payload.get('columns')
        return Snapshot(
            rows=normalize_rows(payload['rows']),
            columns=columns_from_payload(columns) if columns else list(DEFAULT_COLUMNS)
        )
    if isinstance(payload, list):
        return Snapshot(rows=normalize_rows(payload))
    raise InvalidInputError('payload must be {columns, rows} or a list of rows')


def fetch_action_items(api_url=None, timeout=10.0):
    """Fetch the current action items.

    Returns the bundled sample (source='sample') when the API is unreachable,
    answers non-2xx, or returns something that is not a row payload.
    """
    api_url = api_url or ACTION_ITEMS_API_URL
    if not api_url:
        logger.info('No ACTION_ITEMS_API_URL configured, using sample data')
        return sample_snapshot()

    try:
        response = httpx.get(api_url, timeout=timeout)
        response.raise_for_status()
        return parse_payload(response.json())

    except httpx.HTTPStatusError as e:
        logger.error('fetch_action_items: non-OK response %s %s', e.response.status_code, e.response.text[:200])
    except httpx.HTTPError as e:
        logger.error('fetch_action_items: request failed: %s', e)
    except ValueError as e:
        # Covers invalid JSON as well as InvalidInputError
        logger.error('fetch_action_items: invalid response from API: %s', e)

    logger.warning('fetch_action_items failed, falling back to sample data')
    return sample_snapshot()
