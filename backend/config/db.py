import os
from flask_sqlalchemy import SQLAlchemy
from dotenv import load_dotenv
from config.logging import get_logger

# Load environment variables from .env file
load_dotenv()

db = SQLAlchemy()

log = get_logger()

DEFAULT_DATABASE_URL = 'sqlite:///pricing.db'


def initialize_db(app):
    """
    Initialize SQLAlchemy with app config.

    Connection pool options only apply to server databases (PostgreSQL);
    SQLite uses SQLAlchemy's own pool and rejects pool_size/max_overflow.
    """
    database_url = os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL)
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    environment = os.getenv("ENVIRONMENT", "development")

    if not database_url.startswith('sqlite'):
        pool_config = {
            "pool_size": 20,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "echo_pool": environment == "development",
        }

        # Supabase and other connection-limited databases
        if 'supabase' in database_url.lower() or os.getenv('USE_SMALL_POOL') == 'true':
            log.warning("Using small pool for Supabase/limited connection database")
            pool_config["pool_size"] = 5
            pool_config["max_overflow"] = 5

        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = pool_config
        log.info(f"Database pool configured: {pool_config['pool_size']} connections + {pool_config['max_overflow']} overflow")

    db.init_app(app)
