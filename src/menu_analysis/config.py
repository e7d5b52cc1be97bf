"""
Configuration handling for the menu analysis pipeline.
"""
import os
import copy
import logging
import configparser
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()
# Load environment variables
DB_TYPE = os.getenv("DB_TYPE", "sqlite")
DB_NAME = os.getenv("DB_NAME", "data/restaurant.db")
DB_HOST = os.getenv("DB_HOST", "")
DB_PORT = os.getenv("DB_PORT", "")
DB_USER = os.getenv("DB_USER", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for the menu analysis pipeline."""

    def __init__(self, config_file='config.ini', setup_logging=True):
        """
        Initialize configuration from config file.
        """
        self.config = configparser.ConfigParser()

        # Set default values
        self._set_defaults()

        # Try to read from config file
        config_path = Path(config_file) if config_file else None
        found = config_path is not None and config_path.exists()
        if found:
            self.config.read(config_path)

        if setup_logging:
            self._setup_logging()

        if not found:
            logger.warning(f"Config file {config_file} not found. Using defaults.")

    def _set_defaults(self):
        """Set default configuration values."""
        self.config['DATABASE'] = {
            'type': DB_TYPE,
            'name': DB_NAME,
            'host': DB_HOST,
            'port': DB_PORT,
            'user': DB_USER,
            'password': DB_PASSWORD
        }

        self.config['LOGGING'] = {
            'level': 'INFO',
            'file': 'logs/menu_analysis.log'
        }

        self.config['PATHS'] = {
            'input_dir': 'data/input',
            'output_dir': 'data/output',
            'menu_file': 'menu_items.csv',
            'orders_file': 'order_details.csv'
        }

        self.config['REPORT'] = {
            'source': 'csv',
            'bulk_threshold': '12',
            'top_n': '5',
            'quality_check': 'true',
            'stage_db': 'false',
            'export_csv': 'false'
        }

    def _setup_logging(self):
        """Configure logging based on settings."""
        log_config = self.config['LOGGING']
        log_level = getattr(logging, log_config.get('level', 'INFO').upper(), logging.INFO)
        log_file = log_config.get('file', 'logs/menu_analysis.log')

        handlers = [logging.StreamHandler()]
        if log_file:
            # Create directory for log file if it doesn't exist
            log_dir = os.path.dirname(log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)
            handlers.insert(0, logging.FileHandler(log_file))

        # Configure logging
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )

    def with_overrides(self, **report_overrides):
        """
        Return an independent copy, with REPORT values replaced by any
        overrides that are not None.
        """
        clone = copy.copy(self)
        clone.config = configparser.ConfigParser()
        clone.config.read_dict({
            section: dict(self.config.items(section, raw=True))
            for section in self.config.sections()
        })
        for key, value in report_overrides.items():
            if value is not None:
                clone.config['REPORT'][key] = str(value).lower()
        return clone

    def get_database_config(self):
        """
        Get database configuration.

        """
        return {
            'type': self.config['DATABASE'].get('type'),
            'name': self.config['DATABASE'].get('name'),
            'host': self.config['DATABASE'].get('host'),
            'port': self.config['DATABASE'].get('port'),
            'user': self.config['DATABASE'].get('user'),
            'password': self.config['DATABASE'].get('password')
        }

    def get_input_path(self, filename=None):
        """
        Get input directory or file path.

        """
        input_dir = self.config['PATHS'].get('input_dir', 'data/input')
        if filename:
            return os.path.join(input_dir, filename)
        return input_dir

    def get_output_path(self, filename=None):
        """
        Get output directory or file path.

        """
        output_dir = self.config['PATHS'].get('output_dir', 'data/output')

        # Create directory if it doesn't exist
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if filename:
            return os.path.join(output_dir, filename)
        return output_dir

    def get_menu_path(self):
        return self.get_input_path(self.config['PATHS'].get('menu_file', 'menu_items.csv'))

    def get_orders_path(self):
        return self.get_input_path(self.config['PATHS'].get('orders_file', 'order_details.csv'))

    def get_source(self):
        """
        Where the base tables are read from: 'csv' or 'database'.
        """
        source = self.config['REPORT'].get('source', 'csv').strip().lower()
        if source not in ('csv', 'database'):
            raise ValueError(f"Unsupported source: {source}")
        return source

    def get_bulk_threshold(self):
        return self.config['REPORT'].getint('bulk_threshold', 12)

    def get_top_n(self):
        return self.config['REPORT'].getint('top_n', 5)

    def is_quality_check_enabled(self):
        """
        Check if data quality checks are enabled.

        """
        return self.config['REPORT'].getboolean('quality_check', True)

    def is_stage_db_enabled(self):
        """
        Check if base and report tables should be written to the database.
        """
        return self.config['REPORT'].getboolean('stage_db', False)

    def is_export_csv_enabled(self):
        return self.config['REPORT'].getboolean('export_csv', False)
