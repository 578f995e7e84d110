from flask import Flask, jsonify
from flask_cors import CORS
from flask_compress import Compress
from dotenv import load_dotenv
from config.routes import initialize_routes
from config.db import initialize_db as initialize_sqlalchemy, db
from config.logging import get_logger, configure_quiet_logging
from utils.validators import MAX_IMPORT_FILE_SIZE_MB
import models  # noqa: F401  (registers tables for create_all)
import os

# Load environment variables from .env file
# Get the directory where this file is located (backend directory)
basedir = os.path.abspath(os.path.dirname(__file__))
# Load .env from the backend directory
load_dotenv(os.path.join(basedir, '.env'))

ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Request-ID"]
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


def create_app():
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "default-secret-key")
    # Uploads are checked again per file in the import controller
    app.config['MAX_CONTENT_LENGTH'] = (MAX_IMPORT_FILE_SIZE_MB + 1) * 1024 * 1024

    # Get environment (default to development)
    environment = os.getenv("ENVIRONMENT", "development")

    if environment == "production":
        allowed_origins = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()
        ]
        CORS(app,
             origins=allowed_origins,
             allow_headers=ALLOWED_HEADERS,
             methods=ALLOWED_METHODS,
             supports_credentials=True,
             max_age=3600)
    else:
        # Never use origins="*" with supports_credentials=True
        CORS(app,
             origins=["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000", "http://127.0.0.1:5173"],
             allow_headers=ALLOWED_HEADERS,
             methods=ALLOWED_METHODS,
             supports_credentials=True,
             max_age=3600)

    logger = get_logger()
    configure_quiet_logging()

    # Response Compression
    app.config['COMPRESS_MIMETYPES'] = [
        'text/html', 'text/plain', 'application/json'
    ]
    app.config['COMPRESS_LEVEL'] = 6
    app.config['COMPRESS_MIN_SIZE'] = 500  # Only compress responses > 500 bytes
    Compress(app)

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        if environment == "production":
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    @app.errorhandler(413)
    def file_too_large(e):
        return jsonify({
            'success': False,
            'error': 'File too large',
            'message': f'File size exceeds {MAX_IMPORT_FILE_SIZE_MB}MB limit'
        }), 413

    initialize_sqlalchemy(app)  # Init SQLAlchemy ORM

    # Create all tables
    with app.app_context():
        db.create_all()

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({"status": "ok", "environment": environment}), 200

    initialize_routes(app)  # Register routes

    logger.info(f"Pricing API initialized ({environment})")
    return app


if __name__ == "__main__":
    app = create_app()
    environment = os.getenv("ENVIRONMENT", "development")
    port = int(os.getenv("PORT", 5000))
    debug = environment != "production"

    print(f">> Starting Xactimate Pricing API")
    print(f"   Environment: {environment}")
    print(f"   Port: {port}")
    print(f"   Debug: {debug}")
    print("=" * 60)

    app.run(host="0.0.0.0", port=port, debug=debug)
