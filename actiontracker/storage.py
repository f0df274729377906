# Action Tracker Storage Functions
# Attachment uploads to Cloud Storage

import logging
import uuid

from google.cloud import storage
from werkzeug.utils import secure_filename

from .config import GCS_BUCKET, GCS_UPLOAD_PREFIX, GOOGLE_APPLICATION_CREDENTIALS

logger = logging.getLogger(__name__)

_client = None


def get_client():
    """Shared Cloud Storage client (key file when configured, ADC otherwise)."""
    global _client
    if _client is None:
        if GOOGLE_APPLICATION_CREDENTIALS:
            _client = storage.Client.from_service_account_json(GOOGLE_APPLICATION_CREDENTIALS)
        else:
            _client = storage.Client()
    return _client


def object_name(filename, prefix=None):
    """Unique object name for an upload: '<prefix>/<hex>-<safe filename>'."""
    prefix = GCS_UPLOAD_PREFIX if prefix is None else prefix
    safe_name = secure_filename(filename or '') or 'file'
    name = f'{uuid.uuid4().hex}-{safe_name}'
    return f"{prefix.strip('/')}/{name}" if prefix else name


def upload_files(files, bucket_name=None, prefix=None):
    """Upload werkzeug FileStorage objects and return their public URLs.

    URLs come back in the same order as the files.

    Raises:
        RuntimeError: if no bucket is configured
    """
    bucket_name = bucket_name or GCS_BUCKET
    if not bucket_name:
        raise RuntimeError('GCS_BUCKET is not configured')

    bucket = get_client().bucket(bucket_name)
    urls = []
    for upload in files:
        blob = bucket.blob(object_name(upload.filename, prefix))
        blob.upload_from_file(upload.stream, content_type=upload.mimetype or None)
        logger.info('Uploaded %s to gs://%s/%s', upload.filename, bucket_name, blob.name)
        urls.append(blob.public_url)
    return urls
