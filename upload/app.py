# Action Tracker Upload
# Attachment uploads to Cloud Storage

import sys
import os
import logging

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from actiontracker import (
    MAX_UPLOAD_BYTES,
    configure_logging,
    register_request_logging,
    upload_files
)

configure_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_BYTES
register_request_logging(app)


@app.route('/api/upload', methods=['POST'])
def upload():
    """Store uploaded files.

    Accepts:
        - files: one or more multipart file parts

    Returns:
        - urls: public URL for each file, in upload order
    """
    files = [f for f in request.files.getlist('files') if f and f.filename]
    if not files:
        return jsonify({'error': 'No files provided'}), 400

    try:
        urls = upload_files(files)
        return jsonify({'urls': urls})
    except Exception:
        logger.exception('Error uploading files')
        return jsonify({'error': 'internal server error'}), 500


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Action Tracker Upload',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
