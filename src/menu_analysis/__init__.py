"""
Menu and order analysis pipeline for a single restaurant dataset.
"""
from menu_analysis.errors import (
    MenuAnalysisError,
    LoadError,
    ReferentialIntegrityError,
    EmptyDatasetError,
)
from menu_analysis.schemas import MenuItem, OrderLine, OrderLineDetail, ItemStat
from menu_analysis.ingestion.menu_catalog import MenuCatalog
from menu_analysis.ingestion.order_log import OrderLog
from menu_analysis.reporting.engine import ReportEngine
from menu_analysis.reporting.narrator import Narrator

__version__ = "0.1.0"

__all__ = [
    'MenuAnalysisError',
    'LoadError',
    'ReferentialIntegrityError',
    'EmptyDatasetError',
    'MenuItem',
    'OrderLine',
    'OrderLineDetail',
    'ItemStat',
    'MenuCatalog',
    'OrderLog',
    'ReportEngine',
    'Narrator',
]
