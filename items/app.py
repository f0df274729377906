# Action Tracker Items
# Action item CRUD against the BigQuery action items table

import sys
import os
import logging
import threading
import time

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify, send_from_directory

from actiontracker import (
    BQ_TABLE,
    DIST_PATH,
    HEALTH_CHECK_INTERVAL,
    InvalidInputError,
    configure_logging,
    register_request_logging,
    normalize_rows,
    get_table_columns,
    fetch_rows,
    create_row,
    update_row,
    delete_row,
    check_table_access
)

configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
register_request_logging(app)

# Last warehouse check, refreshed by /health when older than HEALTH_CHECK_INTERVAL
warehouse_health = {'ok': False, 'message': 'starting', 'checkedAt': None}
warehouse_health_lock = threading.Lock()


def current_health():
    """Cached warehouse check; concurrent requests share one refresh."""
    with warehouse_health_lock:
        checked_at = warehouse_health['checkedAt']
        if checked_at is None or time.monotonic() - checked_at >= HEALTH_CHECK_INTERVAL:
            warehouse_health.update(check_table_access(BQ_TABLE))
            warehouse_health['checkedAt'] = time.monotonic()
        return {'ok': warehouse_health['ok'], 'message': warehouse_health['message']}


def server_error(message):
    logger.exception(message)
    return jsonify({'error': 'internal server error'}), 500


@app.route('/api/action-items', methods=['GET'])
def list_action_items():
    """Return the table's columns and up to 1000 rows.

    Returns:
        - columns: [{key, label}] in schema order
        - rows: normalized records
    """
    try:
        columns = get_table_columns(BQ_TABLE)
        rows = normalize_rows(fetch_rows(BQ_TABLE))
        return jsonify({
            'columns': [column.to_dict() for column in columns],
            'rows': rows
        })
    except Exception:
        return server_error('Error fetching action-items from BigQuery')


@app.route('/api/action-items', methods=['POST'])
def create_action_item():
    """Create an action item from the JSON body. Returns the new id."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({'error': 'No item data provided'}), 400

    try:
        new_id = create_row(BQ_TABLE, data)
        return jsonify({'success': True, 'id': new_id}), 201
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error creating action-item')


@app.route('/api/action-items/<item_id>', methods=['PUT'])
def update_action_item(item_id):
    """Update fields on an item. Body is {field: value}; id is ignored."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({'error': 'updates must be a JSON object'}), 400

    try:
        affected = update_row(BQ_TABLE, item_id, data)
        if affected == 0:
            return jsonify({'error': 'not_found', 'id': item_id}), 404
        return jsonify({'success': True})
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error updating action-item')


@app.route('/api/action-items/<item_id>', methods=['DELETE'])
def delete_action_item(item_id):
    try:
        affected = delete_row(BQ_TABLE, item_id)
        if affected == 0:
            return jsonify({'error': 'not_found', 'id': item_id}), 404
        return jsonify({'success': True})
    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error deleting action-item')


@app.route('/healthz', methods=['GET'])
def healthz():
    """Liveness probe for Cloud Run"""
    return jsonify({'status': 'ok'})


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint, including BigQuery table access"""
    warehouse = current_health()
    return jsonify({
        'status': 'healthy' if warehouse['ok'] else 'degraded',
        'service': 'Action Tracker Items',
        'version': '1.0',
        'table': BQ_TABLE,
        'warehouse': warehouse
    })


# ===================
# FRONTEND
# ===================

@app.route('/favicon.ico', methods=['GET'])
def favicon():
    if os.path.isfile(os.path.join(DIST_PATH, 'favicon.ico')):
        return send_from_directory(DIST_PATH, 'favicon.ico')
    return '', 204


@app.route('/', methods=['GET'])
def index():
    if os.path.isfile(os.path.join(DIST_PATH, 'index.html')):
        return send_from_directory(DIST_PATH, 'index.html')
    return 'Action Tracker API is running', 200


@app.route('/<path:path>', methods=['GET'])
def frontend(path):
    """Serve built assets, and index.html for any other non-API route"""
    if path.startswith('api/'):
        return jsonify({'error': 'not_found'}), 404
    if os.path.isfile(os.path.join(DIST_PATH, path)):
        return send_from_directory(DIST_PATH, path)
    if not os.path.isfile(os.path.join(DIST_PATH, 'index.html')):
        logger.error('index.html missing in %s', DIST_PATH)
        return 'Frontend not built', 400
    return send_from_directory(DIST_PATH, 'index.html')


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    logger.info('Action Tracker API listening on port %s', port)
    logger.info('Using table: %s', BQ_TABLE)
    app.run(host='0.0.0.0', port=port)
