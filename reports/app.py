# Action Tracker Reports
# Workload reports over the current action items
#
# - Pivot of minutes / deliverables by any two columns
# - Day-by-day workload for a date window
# - Filtered, sorted admin data view with totals

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from actiontracker import (
    ADMIN_VIEW,
    TEAM_MEMBERS,
    InvalidInputError,
    configure_logging,
    register_request_logging,
    fetch_action_items,
    find_column_key,
    available_dimensions,
    distinct_values,
    equals,
    contains,
    date_from,
    date_to,
    require_field,
    filter_records,
    sort_records,
    build_pivot,
    build_daywise,
    resolve_window,
    workload_totals
)

configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
register_request_logging(app)


def column_keys(columns):
    """Keys of the columns with a known role, or None when the table lacks one."""
    return {
        'owner': find_column_key(columns, 'owner'),
        'deadline': find_column_key(columns, 'deadline'),
        'minutes': find_column_key(columns, 'min'),
        'businessType': find_column_key(columns, 'business type'),
        'business': find_column_key(columns, 'business'),
        'status': find_column_key(columns, 'status')
    }


def owner_filter(owner_key, owner):
    """Admin (or no owner) sees everyone's items"""
    return equals(owner_key, None if owner in ('', ADMIN_VIEW) else owner)


def hours_per_day_arg():
    value = request.args.get('hoursPerDay', '')
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise InvalidInputError(f'hoursPerDay must be a number, got {value!r}')


def server_error(message):
    logger.exception(message)
    return jsonify({'error': 'internal server error'}), 500


@app.route('/reports/pivot', methods=['GET'])
def pivot():
    """Workload pivot.

    Accepts (query string):
        - rows, cols: dimension keys (default owner x business type)
        - owner: team member, or Admin / empty for everyone
        - from, to: deadline range (YYYY-MM-DD); both empty means the next 7 days
        - hoursPerDay: override for the days calculation

    Returns:
        - rowKeys, colKeys, rows (cells + totals), columnTotals, grandTotal
        - window actually applied, item count and data source
    """
    try:
        snapshot = fetch_action_items()
        keys = column_keys(snapshot.columns)
        dimensions = available_dimensions(snapshot.columns, keys['minutes'], keys['deadline'])
        dimension_keys = [dimension.key for dimension in dimensions]

        row_dimension = request.args.get('rows') or keys['owner']
        col_dimension = request.args.get('cols') or keys['businessType']
        for name, key in (('rows', row_dimension), ('cols', col_dimension)):
            if key not in dimension_keys:
                return jsonify({
                    'error': f'{name} must be one of the available dimensions',
                    'dimensions': dimension_keys
                }), 400

        window_from = request.args.get('from', '')
        window_to = request.args.get('to', '')
        default_window = not window_from and not window_to
        if default_window:
            start, end = resolve_window()
            window_from, window_to = start.isoformat(), end.isoformat()

        records = filter_records(snapshot.rows, [
            owner_filter(keys['owner'], request.args.get('owner', '')),
            require_field(keys['deadline']),
            date_from(keys['deadline'], window_from),
            date_to(keys['deadline'], window_to)
        ])
        result = build_pivot(records, row_dimension, col_dimension, keys['minutes'], hours_per_day_arg())

        response = result.to_dict()
        response.update({
            'window': {'from': window_from or None, 'to': window_to or None, 'default': default_window},
            'itemCount': len(records),
            'dimensions': [dimension.to_dict() for dimension in dimensions],
            'source': snapshot.source
        })
        return jsonify(response)

    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error building pivot report')


@app.route('/reports/daywise', methods=['GET'])
def daywise():
    """Workload per calendar day.

    Accepts (query string):
        - from, to: window (YYYY-MM-DD); default today .. today + 7
        - owner: team member, or Admin / empty for everyone
        - hoursPerDay: override for the days calculation
    """
    try:
        snapshot = fetch_action_items()
        keys = column_keys(snapshot.columns)

        result = build_daywise(
            snapshot.rows,
            start_date=request.args.get('from') or None,
            end_date=request.args.get('to') or None,
            owner=request.args.get('owner') or None,
            deadline_key=keys['deadline'] or 'deadline',
            minutes_key=keys['minutes'],
            owner_key=keys['owner'] or 'owner',
            hours_per_day=hours_per_day_arg()
        )

        response = result.to_dict()
        response['source'] = snapshot.source
        return jsonify(response)

    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error building day-wise report')


@app.route('/reports/items', methods=['GET'])
def items():
    """Admin data view: filtered, sorted items plus workload totals.

    Accepts (query string):
        - owner, businessType, status: exact match
        - business: case-insensitive search
        - from, to: deadline range (YYYY-MM-DD)
        - sort: column key, dir: asc | desc
    """
    try:
        snapshot = fetch_action_items()
        keys = column_keys(snapshot.columns)
        args = request.args

        sort_key = args.get('sort') or None
        direction = args.get('dir', 'asc')
        if sort_key and sort_key not in [column.key for column in snapshot.columns]:
            return jsonify({'error': f'unknown sort column {sort_key!r}'}), 400
        if direction not in ('asc', 'desc'):
            return jsonify({'error': "dir must be 'asc' or 'desc'"}), 400

        records = filter_records(snapshot.rows, [
            owner_filter(keys['owner'], args.get('owner', '')),
            equals(keys['businessType'], args.get('businessType')),
            equals(keys['status'], args.get('status')),
            contains(keys['business'], args.get('business')),
            date_from(keys['deadline'], args.get('from')),
            date_to(keys['deadline'], args.get('to'))
        ])
        records = sort_records(records, sort_key, descending=direction == 'desc')
        totals = workload_totals(records, keys['minutes'], hours_per_day_arg())

        return jsonify({
            'columns': [column.to_dict() for column in snapshot.columns],
            'rows': records,
            'shown': len(records),
            'total': len(snapshot.rows),
            'summary': totals.to_dict(),
            'source': snapshot.source
        })

    except InvalidInputError as e:
        return jsonify({'error': str(e)}), 400
    except Exception:
        return server_error('Error building items view')


@app.route('/reports/options', methods=['GET'])
def options():
    """Values for the report selectors"""
    try:
        snapshot = fetch_action_items()
        keys = column_keys(snapshot.columns)
        dimensions = available_dimensions(snapshot.columns, keys['minutes'], keys['deadline'])

        return jsonify({
            'teamMembers': TEAM_MEMBERS + [ADMIN_VIEW],
            'owners': distinct_values(snapshot.rows, keys['owner']),
            'businessTypes': distinct_values(snapshot.rows, keys['businessType']),
            'statuses': distinct_values(snapshot.rows, keys['status']),
            'dimensions': [dimension.to_dict() for dimension in dimensions],
            'source': snapshot.source
        })

    except Exception:
        return server_error('Error building report options')


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Action Tracker Reports',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
