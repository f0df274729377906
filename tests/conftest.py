from types import SimpleNamespace

import pytest
from google.cloud import bigquery

from actiontracker import storage, warehouse

ITEMS_TABLE = 'proj.tracker.actionitems'
VENDOR_TABLE = 'proj.tracker.republicservices'

ITEMS_SCHEMA = [
    bigquery.SchemaField('id', 'STRING'),
    bigquery.SchemaField('business_type', 'STRING'),
    bigquery.SchemaField('business', 'STRING'),
    bigquery.SchemaField('owner', 'STRING'),
    bigquery.SchemaField('deadline', 'DATE'),
    bigquery.SchemaField('min', 'STRING'),
    bigquery.SchemaField('status', 'STRING'),
]

VENDOR_SCHEMA = [
    bigquery.SchemaField('id', 'STRING'),
    bigquery.SchemaField('s_no', 'INTEGER'),
    bigquery.SchemaField('work_date', 'DATE'),
    bigquery.SchemaField('description', 'STRING'),
    bigquery.SchemaField('photo_attachments', 'STRING', mode='REPEATED'),
    bigquery.SchemaField('file_attachments', 'STRING', mode='REPEATED'),
]


class FakeJob:
    def __init__(self, rows, affected, error):
        self._rows = rows
        self._error = error
        self.num_dml_affected_rows = affected

    def result(self):
        if self._error is not None:
            raise self._error
        return iter(self._rows)


class FakeBigQuery:
    """In-memory stand-in for bigquery.Client that records every query."""

    def __init__(self):
        self.schemas = {ITEMS_TABLE: ITEMS_SCHEMA, VENDOR_TABLE: VENDOR_SCHEMA}
        self.rows = {ITEMS_TABLE: [], VENDOR_TABLE: []}
        self.queries = []
        self.affected = 1
        self.error = None

    def get_table(self, table_id):
        if table_id not in self.schemas:
            raise Exception(f'Not found: Table {table_id}')
        return SimpleNamespace(schema=self.schemas[table_id])

    def query(self, sql, job_config=None):
        params = list(job_config.query_parameters) if job_config else []
        self.queries.append((sql, params))
        table_id = sql.split('`')[1]
        return FakeJob(self.rows.get(table_id, []), self.affected, self.error)

    @property
    def last_sql(self):
        return self.queries[-1][0]

    @property
    def last_params(self):
        return {param.name: param for param in self.queries[-1][1]}


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name
        self.data = None
        self.content_type = None

    def upload_from_file(self, stream, content_type=None):
        self.data = stream.read()
        self.content_type = content_type
        self.bucket.blobs.append(self)

    @property
    def public_url(self):
        return f'https://storage.googleapis.com/{self.bucket.name}/{self.name}'


class FakeBucket:
    def __init__(self, name):
        self.name = name
        self.blobs = []

    def blob(self, name):
        return FakeBlob(self, name)


class FakeStorage:
    def __init__(self):
        self.buckets = {}

    def bucket(self, name):
        return self.buckets.setdefault(name, FakeBucket(name))


@pytest.fixture
def bq(monkeypatch):
    client = FakeBigQuery()
    monkeypatch.setattr(warehouse, 'get_client', lambda: client)
    return client


@pytest.fixture
def gcs(monkeypatch):
    client = FakeStorage()
    monkeypatch.setattr(storage, 'get_client', lambda: client)
    return client


@pytest.fixture
def action_items():
    return [
        {'id': '1', 'owner': 'Dan', 'business_type': 'External', 'business': 'Acme Inc',
         'deadline': '2025-01-02', 'min': '30', 'status': 'Open'},
        {'id': '2', 'owner': 'Dan', 'business_type': 'Internal', 'business': 'Beta LLC',
         'deadline': '2025-01-02', 'min': '15', 'status': 'Open'},
        {'id': '3', 'owner': 'Kams', 'business_type': 'External', 'business': 'Gamma Co',
         'deadline': '2025-01-03', 'min': '60', 'status': 'Completed'},
        {'id': '4', 'owner': 'Florence', 'business_type': None, 'business': 'acme holdings',
         'deadline': '2025-01-05', 'min': 'abc', 'status': 'In Progress'},
    ]
