import sys
import os

# Add the app directory to Python path for Railway deployment
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, jsonify
from flask_cors import CORS
from datetime import datetime
from dotenv import load_dotenv

from routes.analytics_routes import analytics_bp
from utils.db import ping_database
from utils.error_handler import ErrorCode, format_error_response, handle_errors, ServiceUnavailableError
from utils.overview import OverviewAssembler

load_dotenv()  # Load env vars like MONGODB_URI and RAPIDAPI_KEY

app = Flask(__name__)

# Competencies are ordered by score; keep that order in responses
app.json.sort_keys = False

# Suppress werkzeug OPTIONS request logs
import logging
log = logging.getLogger('werkzeug')
log.setLevel(logging.ERROR)

CORS(app, resources={
    r"/api/*": {
        "origins": "*",
        "methods": ["GET", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization", "X-User-Id"]
    }
})

# Store, job search and clock are swapped out in tests
app.config['ANALYTICS_ASSEMBLER'] = OverviewAssembler()

app.register_blueprint(analytics_bp)


@app.route('/api/health', methods=['GET'])
@handle_errors
def health_check():
    """Health check endpoint"""
    return {
        'status': 'healthy',
        'service': 'carevo-analytics-api',
        'version': '1.0.0',
        'timestamp': datetime.now().isoformat()
    }


@app.route('/api/db-health', methods=['GET'])
@handle_errors
def db_health_check():
    """Ping MongoDB to verify connectivity and auth."""
    try:
        res = ping_database()
    except Exception as e:
        raise ServiceUnavailableError(message="Database connection failed") from e
    return {
        'database': 'connected',
        'ping_result': res
    }


@app.errorhandler(404)
def not_found(_e):
    body, status_code = format_error_response(
        "Not found", code=ErrorCode.RESOURCE_NOT_FOUND, status_code=404)
    return jsonify(body), status_code


if __name__ == '__main__':
    # Use PORT environment variable for Railway/production deployment
    port = int(os.environ.get('PORT', 5000))
    print(f"🚀 Starting analytics API on port {port}...")
    app.run(debug=False, host='0.0.0.0', port=port)
