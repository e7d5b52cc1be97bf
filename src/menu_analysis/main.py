"""
Main pipeline orchestration for the menu analysis report.
"""
import sys
import logging
import argparse
import time
import traceback
from datetime import datetime

from menu_analysis.config import Config
from menu_analysis.db.engine import create_db_engine, init_db
from menu_analysis.db.models import Base
from menu_analysis.errors import LoadError
from menu_analysis.ingestion.menu_catalog import MenuCatalog
from menu_analysis.ingestion.order_log import OrderLog
from menu_analysis.transformation.quality import run_data_quality_checks
from menu_analysis.reporting.engine import ReportEngine
from menu_analysis.reporting.narrator import Narrator
from menu_analysis.loading.writer import (
    write_report,
    export_results_to_csv,
    stage_base_tables,
    load_report_tables,
)

logger = logging.getLogger(__name__)


def load_base_tables(config, engine=None):
    """
    Load the menu and order tables from the configured source.

    Returns:
        tuple: (MenuCatalog, OrderLog)
    """
    if config.get_source() == 'database':
        if engine is None:
            raise LoadError("A database engine is required when source=database")
        logger.info("Reading base tables from the database")
        catalog = MenuCatalog.load('menu_items', engine=engine)
        order_log = OrderLog.load('order_details', engine=engine)
    else:
        catalog = MenuCatalog.load(config.get_menu_path())
        order_log = OrderLog.load(config.get_orders_path())
    return catalog, order_log


def run_pipeline(config_file='config.ini', source=None, quality_check=None, stage_db=None,
                 export_csv=None, top_n=None, bulk_threshold=None, config=None):
    start_time = time.time()
    statistics = {
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'status': 'failed',
        'stages': {},
    }

    try:
        logger.info("Starting menu analysis pipeline")

        # Load configuration
        if config is None:
            config = Config(config_file)

        # Overrides apply to a copy; the caller's Config is left as it was
        config = config.with_overrides(
            source=source,
            quality_check=quality_check,
            stage_db=stage_db,
            export_csv=export_csv,
            top_n=top_n,
            bulk_threshold=bulk_threshold,
        )

        run_quality_check = config.is_quality_check_enabled()
        run_stage_db = config.is_stage_db_enabled()
        data_source = config.get_source()

        logger.info(f"Pipeline mode: source={data_source}, quality_check={run_quality_check}, "
                    f"stage_db={run_stage_db}")

        engine = None
        if data_source == 'database' or run_stage_db:
            engine = create_db_engine(config)
            init_db(engine, Base)

        #  Data Ingestion
        stage_start = time.time()
        catalog, order_log = load_base_tables(config, engine)
        statistics['stages']['ingestion'] = {
            'source': data_source,
            'rows_processed': {
                'menu_items': len(catalog),
                'order_details': len(order_log),
            },
            'duration': time.time() - stage_start,
        }

        # ---- Data Quality Checks
        quality_results = None
        if run_quality_check:
            stage_start = time.time()
            quality_results = run_data_quality_checks({
                'menu_items': catalog.frame,
                'order_details': order_log.frame,
            })
            statistics['stages']['quality_check'] = {
                'duration': time.time() - stage_start,
                'issues_found': quality_results['total_issues'],
            }

        # ---------Reporting
        stage_start = time.time()
        report_engine = ReportEngine(catalog, order_log)
        narrator = Narrator(
            report_engine,
            top_n=config.get_top_n(),
            bulk_threshold=config.get_bulk_threshold(),
        )
        report_text = narrator.render(quality_results)
        report_tables = report_engine.report_tables(top_n=config.get_top_n())

        statistics['stages']['reporting'] = {
            'duration': time.time() - stage_start,
            'rows_generated': {
                table: len(df) for table, df in report_tables.items()
            },
            'max_order_value': str(report_engine.max_order_value()),
        }

        # -------Output
        stage_start = time.time()
        report_path = write_report(report_text, config.get_output_path('report.txt'))
        statistics['stages']['output'] = {'report_path': report_path}

        if config.is_export_csv_enabled():
            exported_files = export_results_to_csv(report_tables, config.get_output_path())
            statistics['stages']['output']['files_exported'] = len(exported_files)
            statistics['stages']['output']['file_paths'] = exported_files

        if run_stage_db:
            if data_source != 'database':
                stage_base_tables(engine, catalog, order_log)
            written = load_report_tables(engine, report_tables)
            statistics['stages']['output']['tables_loaded'] = len(written)

        statistics['stages']['output']['duration'] = time.time() - stage_start

        statistics['report'] = report_text
        statistics['status'] = 'success'
        logger.info("Menu analysis pipeline completed successfully")

    except Exception as e:
        logger.error(f"Pipeline execution failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['status'] = 'failed'
        statistics['error'] = str(e)
        statistics['error_type'] = type(e).__name__

    # Calculate total duration
    statistics['duration'] = time.time() - start_time

    return statistics


def main(argv=None):
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Restaurant Menu & Order Analysis')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    parser.add_argument('--source', choices=['csv', 'database'], help='Where to read the base tables from')
    parser.add_argument('--stage-db', action='store_true', help='Write base and report tables to the database')
    parser.add_argument('--export-csv', action='store_true', help='Export report tables to CSV files')
    parser.add_argument('--no-quality-check', action='store_true', help='Skip data quality checks')
    parser.add_argument('--top-n', type=int, help='Number of top spending orders to report')
    parser.add_argument('--bulk-threshold', type=int, help='Line count above which an order is a bulk order')

    args = parser.parse_args(argv)

    # Run the pipeline
    results = run_pipeline(
        config_file=args.config,
        source=args.source,
        quality_check=False if args.no_quality_check else None,
        stage_db=True if args.stage_db else None,
        export_csv=True if args.export_csv else None,
        top_n=args.top_n,
        bulk_threshold=args.bulk_threshold,
    )

    if results['status'] == 'success':
        print(results['report'])

    # Print summary
    print("\nPipeline Execution Summary:")
    print(f"Status: {results['status']}")
    print(f"Duration: {results['duration']:.2f} seconds")

    if results['status'] == 'failed' and 'error' in results:
        print(f"Error ({results['error_type']}): {results['error']}")

    for stage, stats in results.get('stages', {}).items():
        print(f"\n{stage.capitalize()} stage:")
        for key, value in stats.items():
            if key not in ('rows_processed', 'rows_generated', 'file_paths'):
                print(f"  {key}: {value}")

    return 0 if results['status'] == 'success' else 1


if __name__ == "__main__":
    sys.exit(main())
