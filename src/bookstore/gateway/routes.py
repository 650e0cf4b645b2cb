"""Static route table for the gateway.

Templates use ``{name}`` placeholders. A placeholder that ends the
template swallows the rest of the path, slashes included, so
``/books/{everything}`` matches ``/books/search`` as well as
``/books/1/cover``. Any other placeholder matches a single segment.

Paths are matched as sent, with percent-escapes intact, so an escaped
``/`` or ``?`` stays inside the placeholder value it belongs to.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from src.bookstore.runtime.config.config_data import GatewayRoute
from src.bookstore.runtime.config.config_template import load_yaml_document

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

_routes_adapter = TypeAdapter(list[GatewayRoute])


class RouteTableError(ValueError):
    """Raised when the route table file is missing or invalid."""


def compile_template(template: str) -> re.Pattern[str]:
    """Translate an upstream path template into an anchored regular expression."""
    pattern = []
    position = 0
    for match in _PLACEHOLDER.finditer(template):
        pattern.append(re.escape(template[position : match.start()]))
        is_last = match.end() == len(template)
        pattern.append(f"(?P<{match.group(1)}>{'.+' if is_last else '[^/]+'})")
        position = match.end()
    pattern.append(re.escape(template[position:]))
    return re.compile("^" + "".join(pattern) + "$")


@dataclass(frozen=True)
class RouteMatch:
    route: GatewayRoute
    path: str

    @property
    def downstream_url(self) -> str:
        target = self.route.downstream_host_and_port
        return f"{self.route.downstream_scheme}://{target.host}:{target.port}{self.path}"


class CompiledRoute:
    def __init__(self, route: GatewayRoute):
        self.route = route
        self.pattern = compile_template(route.upstream_path_template)
        self.placeholders = tuple(self.pattern.groupindex)

    def allows(self, method: str) -> bool:
        return not self.route.upstream_http_method or method.upper() in self.route.upstream_http_method

    def downstream_path(self, values: dict[str, str]) -> str:
        missing = set(_PLACEHOLDER.findall(self.route.downstream_path_template)) - set(values)
        if missing:
            raise RouteTableError(
                f"Downstream template {self.route.downstream_path_template!r} "
                f"uses placeholders absent upstream: {sorted(missing)}"
            )
        return _PLACEHOLDER.sub(
            lambda m: values[m.group(1)], self.route.downstream_path_template
        )


class RouteTable:
    """Ordered route table; templates without placeholders are tried first."""

    def __init__(self, routes: list[GatewayRoute]):
        compiled = [CompiledRoute(route) for route in routes]
        # sorted() is stable, so declaration order holds within each group
        self._routes = sorted(compiled, key=lambda r: bool(r.placeholders))
        for entry in self._routes:
            entry.downstream_path({name: name for name in entry.placeholders})

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> list[GatewayRoute]:
        return [entry.route for entry in self._routes]

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Find the route for ``method`` and ``path`` and build its downstream path."""
        for entry in self._routes:
            found = entry.pattern.match(path)
            if found is None or not entry.allows(method):
                continue
            return RouteMatch(route=entry.route, path=entry.downstream_path(found.groupdict()))
        return None

    @classmethod
    def from_document(cls, document: Any) -> "RouteTable":
        """Build a table from a parsed document with a ``routes`` (or ``Routes``) list."""
        if not isinstance(document, dict):
            raise RouteTableError("Route table must be a mapping with a 'routes' list")
        raw_routes = document.get("routes", document.get("Routes"))
        if raw_routes is None:
            raise RouteTableError("Route table has no 'routes' entry")
        try:
            routes = _routes_adapter.validate_python(raw_routes)
        except ValidationError as e:
            raise RouteTableError(f"Invalid route table: {e}") from e
        return cls(routes)


def load_route_table(file_path: Path) -> RouteTable:
    """Load the route table once from a YAML (or JSON) file."""
    if not file_path.exists():
        raise RouteTableError(f"Route table file not found: {file_path}")
    table = RouteTable.from_document(load_yaml_document(file_path))
    logger.info("Loaded {} gateway routes from {}", len(table), file_path)
    return table
