"""Load the query catalog into a read-only registry."""

import os
import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union
import yaml
from pydantic import ValidationError

from .errors import LoadError, QueryNotFound
from .models import Catalog, QueryDefinition


logger = logging.getLogger(__name__)

CatalogSource = Union[bytes, str, Mapping[str, Any]]


class QueryRegistry:
    """Immutable mapping of query name to definition, in catalog order."""

    def __init__(self, catalog: Catalog, source: Optional[str] = None):
        self.catalog = catalog
        self.source = source
        self._queries = MappingProxyType({q.name: q for q in catalog.queries})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "QueryRegistry":
        path = Path(path)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise LoadError(f"Cannot read catalog {path}: {e}") from e
        return load_registry(raw, source_name=str(path))

    @property
    def queries(self) -> Mapping[str, QueryDefinition]:
        return self._queries

    def lookup(self, name: str) -> QueryDefinition:
        try:
            return self._queries[name]
        except KeyError:
            raise QueryNotFound(name) from None

    def list_queries(self) -> List[Dict[str, Any]]:
        """Describe every query: name, description and parameter schema."""
        return [
            {
                'name': q.name,
                'description': q.description,
                'parameters': [
                    {
                        'name': p.name,
                        'parameter_type': p.parameter_type.value,
                        'required': p.required,
                    }
                    for p in q.parameters
                ],
            }
            for q in self._queries.values()
        ]

    def __contains__(self, name: str) -> bool:
        return name in self._queries

    def __len__(self) -> int:
        return len(self._queries)

    def __repr__(self):
        return f"QueryRegistry(source={self.source!r}, queries={list(self._queries)!r})"


def _parse_document(raw: Union[bytes, str]) -> Any:
    """Parse JSON, falling back to YAML."""
    try:
        return json.loads(raw)
    except ValueError:
        pass
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise LoadError(f"Catalog is not valid JSON or YAML: {e}") from e


def load_registry(source: CatalogSource, source_name: Optional[str] = None) -> QueryRegistry:
    """
    Parse and validate a catalog.

    Accepts raw bytes/text (JSON or YAML) or an already-parsed mapping.
    Either the whole catalog loads or LoadError is raised.
    """
    if isinstance(source, (bytes, str)):
        raw_data = _parse_document(source)
    else:
        raw_data = source

    if not isinstance(raw_data, Mapping):
        raise LoadError("Catalog must be an object with 'arangodb_endpoint', 'username', 'password', 'queries'")

    try:
        catalog = Catalog.model_validate(dict(raw_data))
    except ValidationError as e:
        # errors(include_input=False) keeps the password out of the message
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors(include_input=False)
        )
        logger.error(f"Catalog validation failed for {source_name or '<catalog>'}: {problems}")
        raise LoadError(f"Invalid catalog: {problems}") from None

    registry = QueryRegistry(catalog, source=source_name)
    logger.info(f"Loaded {len(registry)} queries from {source_name or '<catalog>'}")
    return registry


class RegistryHolder:
    """
    Holds the current registry and swaps it atomically on reload.

    Readers take ``holder.registry`` once per request and keep using
    that object, so a concurrent reload never mixes versions.
    """

    def __init__(self, registry: QueryRegistry, path: Optional[Union[str, Path]] = None):
        self._registry = registry
        self._path = Path(path) if path else None
        self._reload_lock = threading.Lock()

    @classmethod
    def from_path(cls, path: Optional[Union[str, Path]] = None) -> "RegistryHolder":
        """
        Load from path, or AQL_CATALOG_PATH when path is None.

        Raises ValueError if neither is provided.
        """
        if path is None:
            path = os.getenv("AQL_CATALOG_PATH")

        if path is None:
            raise ValueError("path must be provided or AQL_CATALOG_PATH env var must be set")

        return cls(QueryRegistry.from_file(path), path)

    @property
    def registry(self) -> QueryRegistry:
        return self._registry

    def reload(self, source: Optional[CatalogSource] = None) -> QueryRegistry:
        """
        Hot-reload the catalog.

        On LoadError the current registry stays in place.
        """
        with self._reload_lock:
            if source is not None:
                new_registry = load_registry(source)
            elif self._path is not None:
                new_registry = QueryRegistry.from_file(self._path)
            else:
                raise ValueError("No catalog path or source to reload from")

            old_count = len(self._registry)
            self._registry = new_registry
            logger.info(f"Query registry reloaded: {old_count} -> {len(new_registry)} queries")
            return new_registry
