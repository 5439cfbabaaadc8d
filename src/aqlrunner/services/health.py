"""Health check functions for external service dependencies."""

import logging

from aqlrunner.aql_tools import ConnectionPool, QueryRegistry

logger = logging.getLogger(__name__)


def check_database(pool: ConnectionPool) -> dict:
    """
    Check that ArangoDB is reachable with the catalog credentials.

    Returns:
        dict with keys:
            - healthy (bool): True if the server answered
            - error (str or None): Error message if unhealthy
            - details (dict): server version and pool size when healthy
    """
    try:
        with pool.acquire() as db:
            version = db.version()
        return {
            "healthy": True,
            "error": None,
            "details": {
                "server_version": version,
                "database": pool.settings.database,
                "pool_connections": pool.size,
            },
        }
    except Exception as e:
        message = str(e).replace(pool.settings.password, "***") if pool.settings.password else str(e)
        logger.debug(f"Database health check failed: {message}")
        return {"healthy": False, "error": message, "details": {}}


def check_registry(registry: QueryRegistry) -> dict:
    """Report how many queries are loaded."""
    if len(registry) == 0:
        return {"healthy": False, "error": "No queries loaded", "details": {}}
    return {
        "healthy": True,
        "error": None,
        "details": {"queries_loaded": len(registry), "source": registry.source},
    }
