"""
NSSP Command Line Interface

Usage:
    python -m nssp <command> [args]

Commands:
    run         Ingest the extract, build all views, export them
    summary     Row count, date range and key uniqueness of the extract
    views       List the views each stage creates
    query       Print rows of one view
    reconcile   Compare SQL views with the polars engines

Examples:
    python -m nssp run nssp.yaml
    python -m nssp summary data/nssp.csv
    python -m nssp query data/nssp.csv v_top_pathogen_daily_national --limit 10
    python -m nssp query --database nssp.duckdb v_state_burden_rank_daily --pathogen RSV
"""

import argparse
import logging
import sys

import polars as pl

from nssp.config import NsspConfig, SourceConfig, load_config
from nssp.exceptions import NsspError
from nssp.ingest import load_observations
from nssp.sql.orchestrator import STAGES, SQLOrchestrator
from nssp.validation import reconcile

logger = logging.getLogger(__name__)


def _config_for(args) -> NsspConfig:
    """Config from a YAML file, or a default config around a data file."""
    if args.source.endswith(('.yaml', '.yml')):
        return load_config(args.source)
    return NsspConfig(source=SourceConfig(
        path=args.source,
        date_format=args.date_format,
        on_bad_dates='drop' if args.drop_bad_dates else 'raise',
    ))


def _build(config: NsspConfig) -> tuple:
    """In-memory orchestrator with every stage run over the configured source."""
    observations = load_observations(config)
    orchestrator = SQLOrchestrator()
    orchestrator.load_observations(observations)
    orchestrator.run_all()
    return orchestrator, observations


def cmd_run(args):
    """Ingest, build views, export."""
    config = load_config(args.config)
    if args.output:
        config.export.output_dir = args.output
    if args.database:
        config.database = args.database

    with SQLOrchestrator(config.database) as orchestrator:
        result = orchestrator.run_pipeline(config)

    print(f"Loaded {result['input_rows']:,} observations")
    print(f"Stages: {', '.join(result['stages'])}")
    for path in result['files']:
        print(f"  {path}")
    if result['manifest']:
        print(f"Manifest: {result['manifest']}")
    return 0


def cmd_summary(args):
    """Print the dataset summary."""
    orchestrator, _ = _build(_config_for(args))
    with orchestrator:
        summary = orchestrator.get_summary()
        duplicates = orchestrator.get_duplicate_keys()

    for key, value in summary.items():
        print(f"  {key:<18} {value}")
    if duplicates.height:
        print(f"\n{duplicates.height} duplicated (date, pathogen, geography) keys:")
        print(duplicates.head(10))
    return 0


def cmd_views(args):
    """List views per stage."""
    for name, stage_class in STAGES:
        doc = (stage_class.__doc__ or '').strip().split('\n')[0]
        print(f"{name}: {doc}")
        for view in stage_class.VIEWS:
            print(f"  {view}")
    return 0


def cmd_query(args):
    """Print rows of one view."""
    if args.database:
        orchestrator = SQLOrchestrator(args.database, read_only=True)
    elif args.source:
        orchestrator, _ = _build(_config_for(args))
    else:
        print("ERROR: give a source file or --database")
        return 1

    with orchestrator:
        df = orchestrator.query(
            args.view,
            pathogen=args.pathogen,
            state=args.state,
            limit=args.limit,
        )

    if args.csv:
        sys.stdout.write(df.write_csv())
    else:
        with pl.Config(tbl_rows=args.limit or 50, tbl_cols=-1):
            print(df)
    return 0


def cmd_reconcile(args):
    """Compare SQL views with the engines."""
    orchestrator, observations = _build(_config_for(args))
    with orchestrator:
        results = reconcile(orchestrator, observations)

    for r in results:
        status = "OK" if r.ok else "MISMATCH"
        print(f"  {status:<9} {r.view} ({r.rows:,} rows) {r.detail}")
    return 0 if all(r.ok for r in results) else 1


def _add_source_args(parser, required=True):
    parser.add_argument(
        'source',
        nargs=None if required else '?',
        help='nssp.yaml, or a CSV/parquet extract',
    )
    parser.add_argument(
        '--date-format',
        default=SourceConfig().date_format,
        help='strftime format of text dates (default: %%d-%%m-%%y)',
    )
    parser.add_argument(
        '--drop-bad-dates',
        action='store_true',
        help='Drop rows with unparseable dates instead of failing',
    )


def main(argv=None):
    """NSSP CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='nssp',
        description='NSSP syndromic surveillance views',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m nssp run nssp.yaml
    python -m nssp summary data/nssp.csv
    python -m nssp query data/nssp.csv v_state_yearly_rank --pathogen RSV
        """,
    )
    parser.add_argument('--quiet', '-q', action='store_true', help='Only log warnings')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # run command
    run_parser = subparsers.add_parser('run', help='Ingest, build views, export')
    run_parser.add_argument('config', help='nssp.yaml, or directory containing it')
    run_parser.add_argument('--output', '-o', help='Override export.output_dir')
    run_parser.add_argument('--database', help='Override DuckDB database path')

    # summary command
    summary_parser = subparsers.add_parser('summary', help='Dataset sanity checks')
    _add_source_args(summary_parser)

    # views command
    subparsers.add_parser('views', help='List views per stage')

    # query command
    query_parser = subparsers.add_parser('query', help='Print rows of one view')
    _add_source_args(query_parser, required=False)
    query_parser.add_argument('view', help='View name, e.g. v_state_yearly_rank')
    query_parser.add_argument('--database', help='Query an existing DuckDB file instead')
    query_parser.add_argument('--pathogen', help='Filter on pathogen')
    query_parser.add_argument('--state', help='Filter on state')
    query_parser.add_argument('--limit', type=int, help='Maximum rows')
    query_parser.add_argument('--csv', action='store_true', help='Write CSV to stdout')

    # reconcile command
    reconcile_parser = subparsers.add_parser('reconcile', help='Compare SQL views with engines')
    _add_source_args(reconcile_parser)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command is None:
        parser.print_help()
        return 0

    handlers = {
        'run': cmd_run,
        'summary': cmd_summary,
        'views': cmd_views,
        'query': cmd_query,
        'reconcile': cmd_reconcile,
    }

    try:
        return handlers[args.command](args)
    except (NsspError, FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
