import pytest

from actiontracker import warehouse
from actiontracker.errors import InvalidInputError

from conftest import ITEMS_TABLE, VENDOR_TABLE


def test_fetch_rows_returns_dicts(bq):
    bq.rows[ITEMS_TABLE] = [{'id': '1', 'owner': 'Dan'}]
    assert warehouse.fetch_rows(ITEMS_TABLE) == [{'id': '1', 'owner': 'Dan'}]
    assert bq.last_sql == f'SELECT * FROM `{ITEMS_TABLE}` LIMIT 1000'


def test_table_reference_must_have_three_parts(bq):
    with pytest.raises(InvalidInputError):
        warehouse.fetch_rows('tracker.actionitems')
    assert bq.queries == []


def test_get_table_columns(bq):
    columns = warehouse.get_table_columns(ITEMS_TABLE)
    assert [column.key for column in columns][:3] == ['id', 'business_type', 'business']
    assert columns[1].label == 'BUSINESS_TYPE'


def test_check_table_access(bq):
    assert warehouse.check_table_access(ITEMS_TABLE) == {'ok': True, 'message': 'ok'}

    result = warehouse.check_table_access('proj.tracker.missing')
    assert result['ok'] is False
    assert result['message'].startswith('BigQuery unavailable: Not found')


def test_create_row_assigns_id_and_binds_parameters(bq):
    row_id = warehouse.create_row(ITEMS_TABLE, {'owner': 'Dan', 'deadline': '2025-01-02', 'min': 30})

    assert len(row_id) == 36
    assert bq.last_sql == (
        f'INSERT INTO `{ITEMS_TABLE}` (`owner`, `deadline`, `min`, `id`) VALUES (@p0, @p1, @p2, @p3)'
    )
    params = bq.last_params
    assert params['p0'].value == 'Dan'
    assert params['p1'].type_ == 'DATE'
    assert params['p2'].value == '30'
    assert params['p3'].value == row_id


def test_create_row_keeps_given_id(bq):
    assert warehouse.create_row(ITEMS_TABLE, {'id': 'abc', 'owner': 'Dan'}) == 'abc'


def test_create_row_rejects_unknown_fields(bq):
    with pytest.raises(InvalidInputError, match='unknown field'):
        warehouse.create_row(ITEMS_TABLE, {'owner': 'Dan', 'colour': 'red'})
    assert bq.queries == []


def test_update_row(bq):
    affected = warehouse.update_row(ITEMS_TABLE, '7', {'id': 'ignored', 'status': 'Completed', 'deadline': ''})

    assert affected == 1
    assert bq.last_sql == f'UPDATE `{ITEMS_TABLE}` SET `status` = @p0, `deadline` = @p1 WHERE id = @idParam'
    params = bq.last_params
    assert params['p0'].value == 'Completed'
    assert params['p1'].value is None
    assert params['idParam'].value == '7'


def test_update_row_needs_fields(bq):
    with pytest.raises(InvalidInputError, match='no fields to update'):
        warehouse.update_row(ITEMS_TABLE, '7', {'id': '7'})


def test_update_reports_missing_row(bq):
    bq.affected = 0
    assert warehouse.update_row(ITEMS_TABLE, 'nope', {'status': 'Open'}) == 0


def test_delete_row(bq):
    assert warehouse.delete_row(ITEMS_TABLE, '7') == 1
    assert bq.last_sql == f'DELETE FROM `{ITEMS_TABLE}` WHERE id = @id'
    assert bq.last_params['id'].value == '7'


def test_typed_and_repeated_parameters(bq):
    warehouse.create_row(VENDOR_TABLE, {
        's_no': '12',
        'photo_attachments': ['https://a/1.png', 'https://a/2.png'],
        'file_attachments': '',
    })
    params = bq.last_params
    assert params['p0'].type_ == 'INT64'
    assert params['p0'].value == 12
    assert params['p1'].array_type == 'STRING'
    assert params['p1'].values == ['https://a/1.png', 'https://a/2.png']
    assert params['p2'].values == []


def test_non_numeric_integer_is_rejected(bq):
    with pytest.raises(InvalidInputError, match='s_no must be a number'):
        warehouse.create_row(VENDOR_TABLE, {'s_no': 'twelve'})


def test_query_errors_propagate(bq):
    bq.error = RuntimeError('UPDATE or DELETE statement over table would affect rows in the streaming buffer')
    with pytest.raises(RuntimeError) as info:
        warehouse.delete_row(VENDOR_TABLE, '1')
    assert warehouse.is_streaming_buffer_error(info.value)
    assert not warehouse.is_streaming_buffer_error(ValueError('quota exceeded'))
