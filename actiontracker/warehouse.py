# Action Tracker Warehouse Functions
# All BigQuery read/write operations

import logging
import uuid
from collections.abc import Mapping

from google.cloud import bigquery

from .config import GOOGLE_APPLICATION_CREDENTIALS, QUERY_ROW_LIMIT
from .errors import InvalidInputError
from .helpers import split_table_ref
from .records import Column

logger = logging.getLogger(__name__)

# Schema field type -> query parameter type
PARAMETER_TYPES = {
    'STRING': 'STRING',
    'BYTES': 'BYTES',
    'INTEGER': 'INT64',
    'INT64': 'INT64',
    'FLOAT': 'FLOAT64',
    'FLOAT64': 'FLOAT64',
    'NUMERIC': 'NUMERIC',
    'BIGNUMERIC': 'BIGNUMERIC',
    'BOOLEAN': 'BOOL',
    'BOOL': 'BOOL',
    'DATE': 'DATE',
    'DATETIME': 'DATETIME',
    'TIMESTAMP': 'TIMESTAMP',
    'TIME': 'TIME'
}

_client = None


def get_client():
    """Shared BigQuery client.

    Uses the key file named by GOOGLE_APPLICATION_CREDENTIALS when set,
    otherwise Application Default Credentials (the Cloud Run service account).
    """
    global _client
    if _client is None:
        if GOOGLE_APPLICATION_CREDENTIALS:
            logger.info('GOOGLE_APPLICATION_CREDENTIALS is set (key file detected)')
            _client = bigquery.Client.from_service_account_json(GOOGLE_APPLICATION_CREDENTIALS)
        else:
            logger.info('No GOOGLE_APPLICATION_CREDENTIALS found. Using Application Default Credentials (ADC).')
            _client = bigquery.Client()
    return _client


def _table_id(table_full):
    project, dataset, table = split_table_ref(table_full)
    return f'{project}.{dataset}.{table}'


# ===================
# READ OPERATIONS
# ===================

def get_table_schema(table_full):
    """Schema fields of the table, in table order."""
    table = get_client().get_table(_table_id(table_full))
    return list(table.schema)


def get_table_columns(table_full):
    """Column descriptors for every schema field (label is the upper-cased name)."""
    return [Column(key=field.name, label=str(field.name).upper()) for field in get_table_schema(table_full)]


def fetch_rows(table_full, limit=QUERY_ROW_LIMIT):
    """Fetch up to `limit` rows as plain dicts."""
    query = f'SELECT * FROM `{_table_id(table_full)}` LIMIT {int(limit)}'
    rows = get_client().query(query).result()
    return [dict(row) for row in rows]


def check_table_access(table_full):
    """Lightweight permission check used by health endpoints.

    Returns {'ok': bool, 'message': str}; never raises.
    """
    try:
        get_client().get_table(_table_id(table_full))
        logger.info('Startup check: BigQuery table accessible')
        return {'ok': True, 'message': 'ok'}
    except Exception as e:
        logger.error('Startup check failed: %s', e, exc_info=True)
        return {'ok': False, 'message': f'BigQuery unavailable: {str(e)[:200]}'}


# ===================
# WRITE OPERATIONS
# ===================

def create_row(table_full, fields):
    """Insert one row and return its id.

    A UUID is assigned when the payload has no id.
    """
    if not isinstance(fields, Mapping):
        raise InvalidInputError('item must be a JSON object')

    values = dict(fields)
    values['id'] = str(values.get('id') or uuid.uuid4())

    schema = _schema_by_name(table_full)
    names = _check_fields(schema, values)
    params = [_query_parameter(f'p{i}', schema[name], values[name]) for i, name in enumerate(names)]

    column_list = ', '.join(f'`{name}`' for name in names)
    value_list = ', '.join(f'@p{i}' for i in range(len(names)))
    query = f'INSERT INTO `{_table_id(table_full)}` ({column_list}) VALUES ({value_list})'

    _run(query, params)
    logger.info('Created row %s in %s', values['id'], table_full)
    return values['id']


def update_row(table_full, row_id, updates):
    """Update fields on the row with this id; returns the affected row count."""
    if not isinstance(updates, Mapping):
        raise InvalidInputError('updates must be a JSON object')

    values = {key: value for key, value in updates.items() if key != 'id'}
    if not values:
        raise InvalidInputError('no fields to update')

    schema = _schema_by_name(table_full)
    names = _check_fields(schema, values)
    params = [_query_parameter(f'p{i}', schema[name], values[name]) for i, name in enumerate(names)]
    params.append(_query_parameter('idParam', schema['id'], row_id))

    set_clauses = ', '.join(f'`{name}` = @p{i}' for i, name in enumerate(names))
    query = f'UPDATE `{_table_id(table_full)}` SET {set_clauses} WHERE id = @idParam'

    affected = _run(query, params)
    logger.info('Updated row %s in %s: %s', row_id, table_full, names)
    return affected


def delete_row(table_full, row_id):
    """Delete the row with this id; returns the affected row count."""
    schema = _schema_by_name(table_full)
    _check_fields(schema, {'id': row_id})
    query = f'DELETE FROM `{_table_id(table_full)}` WHERE id = @id'

    affected = _run(query, [_query_parameter('id', schema['id'], row_id)])
    logger.info('Deleted row %s from %s', row_id, table_full)
    return affected


def is_streaming_buffer_error(error):
    """True when BigQuery refused a DML change because the row is still in the streaming buffer."""
    return 'streaming buffer' in str(error).lower()


# ===================
# QUERY BUILDING
# ===================

def _run(query, params):
    job_config = bigquery.QueryJobConfig(query_parameters=params)
    job = get_client().query(query, job_config=job_config)
    job.result()
    return job.num_dml_affected_rows


def _schema_by_name(table_full):
    return {field.name: field for field in get_table_schema(table_full)}


def _check_fields(schema, values):
    """Field names in payload order, all of which must exist in the schema."""
    unknown = [name for name in values if name not in schema]
    if unknown:
        raise InvalidInputError(f"unknown field(s): {', '.join(sorted(unknown))}")
    return list(values)


def _query_parameter(name, schema_field, value):
    param_type = PARAMETER_TYPES.get(str(schema_field.field_type).upper())
    if param_type is None:
        raise InvalidInputError(f'field {schema_field.name} has unsupported type {schema_field.field_type}')

    if schema_field.mode == 'REPEATED':
        if value in (None, ''):
            items = []
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            items = [value]
        return bigquery.ArrayQueryParameter(
            name, param_type, [_coerce(schema_field.name, item, param_type) for item in items]
        )

    return bigquery.ScalarQueryParameter(name, param_type, _coerce(schema_field.name, value, param_type))


def _coerce(field_name, value, param_type):
    """Turn form values into something the parameter type accepts.

    Empty strings become NULL for every non-string type.
    """
    if param_type in ('STRING', 'BYTES'):
        return None if value is None else str(value)
    if value in (None, ''):
        return None

    try:
        if param_type == 'INT64':
            return int(value)
        if param_type == 'FLOAT64':
            return float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f'{field_name} must be a number, got {value!r}')

    if param_type == 'BOOL':
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ('true', '1', 'yes'):
            return True
        if text in ('false', '0', 'no'):
            return False
        raise InvalidInputError(f'{field_name} must be true or false, got {value!r}')

    return value
