"""
Main entry point: list catalog queries, run one, or serve them over MCP.
"""
import os
import sys
import json
import uuid
import logging
import asyncio
import argparse

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = None):
    """Configure application logging (stderr keeps stdout clean for results)."""
    log_level = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    # Create logs directory if it doesn't exist
    os.makedirs('logs', exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler('logs/app.log'),
            logging.StreamHandler(sys.stderr)
        ]
    )


def run_mcp_server():
    """Run MCP server in current thread."""
    from aqlrunner.interfaces.mcp.server import main as mcp_main

    logger.info("Starting MCP server...")
    asyncio.run(mcp_main())


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='aql-runner - Run catalog AQL queries against ArangoDB',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  aql-runner --list                                   List catalog queries
  aql-runner --query "Get Users" --args '{"minAge": 21}'
  aql-runner --check                                  Check database connectivity
  aql-runner --mcp                                    Run MCP server on stdio

  # Catalog location (default: ./config.json):
  AQL_CATALOG_PATH=catalog.json aql-runner --list
        """
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--list', action='store_true', help='List queries and their parameters')
    group.add_argument('--query', metavar='NAME', help='Execute the named query')
    group.add_argument('--check', action='store_true', help='Check catalog and database health')
    group.add_argument('--mcp', action='store_true', help='Run MCP server (stdio)')

    parser.add_argument(
        '--args',
        default='{}',
        metavar='JSON',
        help='Query arguments as a JSON object (with --query)'
    )
    parser.add_argument('--catalog', help='Catalog file (overrides AQL_CATALOG_PATH)')

    return parser.parse_args(argv)


def _print_json(payload):
    print(json.dumps(payload, indent=2, default=str))


def main(argv=None):
    """
    Dispatch to one action and exit with a status code.

    Exit codes: 0 success, 1 query/health failure, 2 usage or catalog error.
    """
    args = parse_args(argv)

    if args.catalog:
        os.environ['AQL_CATALOG_PATH'] = args.catalog

    if args.mcp:
        setup_logging()
        run_mcp_server()  # Blocks
        return 0

    from aqlrunner.config import load_config
    from aqlrunner.aql_tools import (
        ConnectionPool,
        ExecutionContext,
        LoadError,
        QueryExecutor,
        RegistryHolder,
    )
    from aqlrunner.services.health import check_database, check_registry

    try:
        config = load_config()
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    setup_logging(config.log_level)

    try:
        holder = RegistryHolder.from_path(config.catalog_path)
    except LoadError as e:
        logger.error(f"Cannot load catalog: {e}")
        return 2

    if args.list:
        _print_json(holder.registry.list_queries())
        return 0

    pool = ConnectionPool(config.connection_settings(holder.registry.catalog))
    try:
        if args.check:
            report = {
                'registry': check_registry(holder.registry),
                'database': check_database(pool),
            }
            _print_json(report)
            return 0 if all(r['healthy'] for r in report.values()) else 1

        try:
            params = json.loads(args.args)
        except json.JSONDecodeError as e:
            logger.error(f"--args is not valid JSON: {e}")
            return 2
        if not isinstance(params, dict):
            logger.error("--args must be a JSON object")
            return 2

        executor = QueryExecutor(holder, pool)
        context = ExecutionContext(
            correlation_id=str(uuid.uuid4()),
            interface='cli',
            user_id=os.getenv('USER')
        )
        result = executor.execute(args.query, params, context)
        _print_json(result.to_dict())
        return 0 if result.success else 1
    finally:
        pool.close()


if __name__ == "__main__":
    sys.exit(main())
