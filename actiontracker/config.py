# Action Tracker Config
# Central configuration for all Action Tracker services

import os

from dotenv import load_dotenv

load_dotenv()

# BigQuery tables (project.dataset.table)
BQ_TABLE = os.environ.get('BQ_TABLE', 'gen-lang-client-0815432790.oberoiventures.actionitemstable')
BQ_VENDOR_TABLE = os.environ.get('BQ_VENDOR_TABLE', 'gen-lang-client-0815432790.oberoiventures.republicservices')
QUERY_ROW_LIMIT = 1000

# Key file for local development; unset means Application Default Credentials
GOOGLE_APPLICATION_CREDENTIALS = os.environ.get('GOOGLE_APPLICATION_CREDENTIALS')

# Cloud Storage
GCS_BUCKET = os.environ.get('GCS_BUCKET')
GCS_UPLOAD_PREFIX = os.environ.get('GCS_UPLOAD_PREFIX', 'uploads')
MAX_UPLOAD_BYTES = 25 * 1024 * 1024

# Items API, read by the reports service
ACTION_ITEMS_API_URL = os.environ.get('ACTION_ITEMS_API_URL', 'http://localhost:8080/api/action-items')

# Seconds between warehouse health checks
HEALTH_CHECK_INTERVAL = 300

# Built frontend
DIST_PATH = os.environ.get('DIST_PATH', os.path.join(os.getcwd(), 'dist'))

# Workload reporting
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = float(os.environ.get('HOURS_PER_DAY', '6'))
LOOKAHEAD_DAYS = 7

# Team
TEAM_MEMBERS = ['Florence', 'Dan', 'Kams', 'Sunny']
ADMIN_VIEW = 'Admin'
