import pandas as pd
import pytest

from menu_analysis.config import Config
from menu_analysis.ingestion.menu_catalog import MenuCatalog
from menu_analysis.ingestion.order_log import OrderLog
from menu_analysis.reporting.engine import ReportEngine


MENU_ROWS = [
    # menu_item_id, item_name, category, price
    ('101', 'Hamburger', 'American', '12.95'),
    ('102', 'Cheeseburger', 'American', '13.95'),
    ('103', 'Chicken Tacos', 'Mexican', '11.95'),
    ('104', 'Steak Tacos', 'Mexican', '13.95'),
    ('105', 'Spaghetti', 'Italian', '14.50'),
    ('106', 'Korean Beef Bowl', 'Asian', '17.95'),
    ('107', 'Edamame', 'Asian', '5.00'),
    ('108', 'Chips & Salsa', 'Mexican', '7.00'),
]

ORDER_ROWS = [
    # order_details_id, order_id, order_date, order_time, item_id
    ('1', '1', '1/1/23', '11:38:36 AM', '106'),
    ('2', '1', '1/1/23', '11:38:36 AM', '105'),
    ('3', '2', '1/1/23', '11:57:40 AM', '101'),
    ('4', '2', '1/1/23', '11:57:40 AM', '101'),
    ('5', '2', '1/1/23', '11:57:40 AM', '107'),
    ('6', '3', '2/14/23', '12:12:28 PM', '106'),
    ('7', '3', '2/14/23', '12:12:28 PM', '102'),
    ('8', '4', '3/2/23', '6:04:10 PM', '103'),
    ('9', '4', '3/2/23', '6:04:10 PM', ''),
    ('10', '5', '3/31/23', '10:50:01 PM', '105'),
    ('11', '5', '3/31/23', '10:50:01 PM', '106'),
]


@pytest.fixture
def menu_df():
    """Menu table shaped like the source CSV."""
    return pd.DataFrame(MENU_ROWS, columns=['menu_item_id', 'item_name', 'category', 'price'])


@pytest.fixture
def orders_df():
    """Order details shaped like the source CSV, with one line missing its item."""
    return pd.DataFrame(
        ORDER_ROWS,
        columns=['order_details_id', 'order_id', 'order_date', 'order_time', 'item_id'],
    )


@pytest.fixture
def input_dir(tmp_path, menu_df, orders_df):
    directory = tmp_path / 'input'
    directory.mkdir()
    menu_df.to_csv(directory / 'menu_items.csv', index=False)
    orders_df.to_csv(directory / 'order_details.csv', index=False)
    return directory


@pytest.fixture
def catalog(menu_df):
    return MenuCatalog.load(menu_df)


@pytest.fixture
def order_log(orders_df):
    return OrderLog.load(orders_df)


@pytest.fixture
def report_engine(catalog, order_log):
    return ReportEngine(catalog, order_log)


@pytest.fixture
def make_config(tmp_path, input_dir):
    """Build a Config pointing at temporary input, output and database paths."""
    def _make(**report_settings):
        settings = {
            'source': 'csv',
            'bulk_threshold': '12',
            'top_n': '5',
            'quality_check': 'true',
            'stage_db': 'false',
            'export_csv': 'false',
        }
        settings.update({k: str(v).lower() for k, v in report_settings.items()})

        lines = [
            '[DATABASE]',
            'type = sqlite',
            f"name = {tmp_path / 'db' / 'restaurant.db'}",
            '',
            '[LOGGING]',
            'level = DEBUG',
            'file =',
            '',
            '[PATHS]',
            f'input_dir = {input_dir}',
            f"output_dir = {tmp_path / 'output'}",
            '',
            '[REPORT]',
        ]
        lines += [f'{key} = {value}' for key, value in settings.items()]

        config_file = tmp_path / 'config.ini'
        config_file.write_text('\n'.join(lines) + '\n')
        return Config(str(config_file), setup_logging=False)
    return _make
