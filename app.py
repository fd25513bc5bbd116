"""
Flask application for the dose engine.
Serves the dose calculation API to the case-management tool.
"""

import os
import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS

# Configure logging
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
CORS(app)

# Register API blueprints
from api.dose_api import dose_api
app.register_blueprint(dose_api)
logger.info("Dose API registered successfully")

@app.route('/health', methods=['GET'])
def health():
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat()
    })

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    logger.info(f"Starting dose engine API on port {port}")
    app.run(host='0.0.0.0', port=port, debug=False)
