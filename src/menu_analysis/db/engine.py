"""
Database connection handling for the menu analysis pipeline.
"""
import os
import logging
from sqlalchemy import create_engine

logger = logging.getLogger(__name__)


def build_connection_string(db_config):
    if db_config['type'] == 'sqlite':
        if not db_config['name'] or db_config['name'] == ':memory:':
            return "sqlite://"
        return f"sqlite:///{db_config['name']}"
    elif db_config['type'] in ('postgres', 'postgresql'):
        return f"postgresql+psycopg2://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"
    elif db_config['type'] == 'mysql':
        return f"mysql+pymysql://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"
    raise ValueError(f"Unsupported database type: {db_config['type']}")


def create_db_engine(config):
    """
    Create a SQLAlchemy engine from the DATABASE section of the config.
    """
    try:
        db_config = config.get_database_config()
        if db_config['type'] == 'sqlite' and db_config['name'] and db_config['name'] != ':memory:':
            db_dir = os.path.dirname(db_config['name'])
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir)
        engine = create_engine(build_connection_string(db_config))
        logger.info(f"Database connection created for {db_config['type']}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database connection: {str(e)}")
        raise


def init_db(engine, base):
    """
    Initialize database tables.
    """
    base.metadata.create_all(engine)
    logger.info("Database tables initialized")
