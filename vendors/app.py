# Action Tracker Vendors
# Republic Services work records (date, description, photo and file attachments)

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from actiontracker import (
    BQ_VENDOR_TABLE,
    InvalidInputError,
    configure_logging,
    register_request_logging,
    normalize_rows,
    fetch_rows,
    create_row,
    update_row,
    delete_row,
    is_streaming_buffer_error
)

configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
register_request_logging(app)

ATTACHMENT_FIELDS = ['photo_attachments', 'file_attachments']
REQUIRED_FIELDS = ['work_date', 'description']


def vendor_record(row):
    """Work record with attachment fields always present as lists"""
    record = dict(row)
    for field in ATTACHMENT_FIELDS:
        value = record.get(field)
        record[field] = value if isinstance(value, list) else []
    return record


def server_error(message):
    logger.exception(message)
    return jsonify({'error': 'internal server error'}), 500


@app.route('/api/republicservices', methods=['GET'])
def list_work_records():
    try:
        rows = [vendor_record(row) for row in normalize_rows(fetch_rows(BQ_VENDOR_TABLE))]
        return jsonify({'rows': rows})
    except Exception:
        return server_error('Error fetching Republic Services records')


@app.route('/api/republicservices', methods=['POST'])
def create_work_record():
    """Create a work record.

    Accepts:
        - work_date, description (required)
        - s_no, photo_attachments, file_attachments (optional)
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'No record data provided'}), 400

    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        return jsonify({'error': f"Missing required fields: {', '.join(missing)}"}), 400

    try:
        new_id = create_row(BQ_VENDOR_TABLE, data)
        return jsonify({'success': True, 'id': new_id}), 201
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error creating Republic Services record')


@app.route('/api/republicservices/<record_id>', methods=['PUT'])
def update_work_record(record_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'updates must be a JSON object'}), 400

    try:
        affected = update_row(BQ_VENDOR_TABLE, record_id, data)
        if affected == 0:
            return jsonify({'error': 'not_found', 'id': record_id}), 404
        return jsonify({'success': True})
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        if is_streaming_buffer_error(e):
            return streaming_buffer_conflict(record_id)
        return server_error('Error updating Republic Services record')


@app.route('/api/republicservices/<record_id>', methods=['DELETE'])
def delete_work_record(record_id):
    try:
        affected = delete_row(BQ_VENDOR_TABLE, record_id)
        if affected == 0:
            return jsonify({'error': 'not_found', 'id': record_id}), 404
        return jsonify({'success': True})
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        if is_streaming_buffer_error(e):
            return streaming_buffer_conflict(record_id)
        return server_error('Error deleting Republic Services record')


def streaming_buffer_conflict(record_id):
    logger.warning('Record %s is still in the BigQuery streaming buffer', record_id)
    return jsonify({
        'error': 'streaming_buffer',
        'id': record_id,
        'message': 'Recently added records cannot be changed for up to 90 minutes. Try again later.'
    }), 409


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Action Tracker Vendors',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
