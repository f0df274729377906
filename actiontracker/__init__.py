# Action Tracker Shared Module
# Common functions used across all Action Tracker services

from .config import (
    ADMIN_VIEW,
    BQ_TABLE,
    BQ_VENDOR_TABLE,
    DIST_PATH,
    HEALTH_CHECK_INTERVAL,
    HOURS_PER_DAY,
    MAX_UPLOAD_BYTES,
    TEAM_MEMBERS
)

from .errors import InvalidInputError

from .logging_config import (
    configure_logging,
    register_request_logging
)

from .helpers import (
    split_table_ref,
    parse_number,
    parse_iso_date,
    format_date_display
)

from .records import (
    Column,
    normalize_row,
    normalize_rows,
    find_column_key,
    available_dimensions,
    distinct_values
)

from .filters import (
    equals,
    contains,
    date_from,
    date_to,
    require_field,
    filter_records,
    sort_records
)

from .reports import (
    BLANK,
    build_pivot,
    build_daywise,
    resolve_window,
    workload_totals
)

from .warehouse import (
    get_table_columns,
    fetch_rows,
    create_row,
    update_row,
    delete_row,
    check_table_access,
    is_streaming_buffer_error
)

from .storage import upload_files

from .dataservice import fetch_action_items
