"""Unit tests for the gateway route table."""

from pathlib import Path

import pytest

from src.bookstore.gateway.routes import (
    RouteTable,
    RouteTableError,
    compile_template,
    load_route_table,
)
from src.bookstore.runtime.config.config_data import GatewayRoute

BACKEND = {"host": "localhost", "port": 5000}


def route(upstream: str, downstream: str, methods=None, **extra) -> GatewayRoute:
    return GatewayRoute(
        upstream_path_template=upstream,
        upstream_http_method=methods,
        downstream_path_template=downstream,
        downstream_host_and_port=extra.pop("target", BACKEND),
        **extra,
    )


class TestCompileTemplate:
    def test_exact_template(self):
        pattern = compile_template("/books")

        assert pattern.match("/books")
        assert not pattern.match("/books/1")
        assert not pattern.match("/book")

    def test_trailing_placeholder_spans_segments(self):
        pattern = compile_template("/books/{everything}")

        assert pattern.match("/books/1/cover").group("everything") == "1/cover"
        assert not pattern.match("/books/")

    def test_inner_placeholder_is_one_segment(self):
        pattern = compile_template("/shelves/{shelf}/books")

        assert pattern.match("/shelves/7/books").group("shelf") == "7"
        assert not pattern.match("/shelves/7/8/books")

    def test_literal_characters_escaped(self):
        pattern = compile_template("/v1.0/books")

        assert pattern.match("/v1.0/books")
        assert not pattern.match("/v1x0/books")


class TestRouteTableMatch:
    def test_routes_books_paths(self, route_table: RouteTable):
        listing = route_table.match("GET", "/books")
        by_id = route_table.match("GET", "/books/42")

        assert listing.downstream_url == "http://backend:8000/api/books"
        assert by_id.downstream_url == "http://backend:8000/api/books/42"

    def test_search_goes_through_placeholder(self, route_table: RouteTable):
        match = route_table.match("GET", "/books/search")

        assert match.path == "/api/books/search"

    def test_method_filter(self, route_table: RouteTable):
        assert route_table.match("POST", "/books") is not None
        assert route_table.match("DELETE", "/books") is None
        assert route_table.match("POST", "/books/1") is None
        assert route_table.match("put", "/books/1") is not None

    def test_unknown_path(self, route_table: RouteTable):
        assert route_table.match("GET", "/authors") is None

    def test_empty_method_list_allows_any(self):
        table = RouteTable([route("/books", "/api/books")])

        for method in ("GET", "POST", "PATCH", "OPTIONS"):
            assert table.match(method, "/books") is not None

    def test_exact_template_wins_over_placeholder(self):
        table = RouteTable(
            [
                route("/books/{everything}", "/api/books/{everything}"),
                route("/books/featured", "/api/featured"),
            ]
        )

        assert table.match("GET", "/books/featured").path == "/api/featured"
        assert table.match("GET", "/books/1").path == "/api/books/1"

    def test_declaration_order_within_group(self):
        table = RouteTable(
            [
                route("/books/{rest}", "/first/{rest}"),
                route("/books/{other}", "/second/{other}"),
            ]
        )

        assert table.match("GET", "/books/1").path == "/first/1"

    def test_downstream_scheme_and_target(self):
        table = RouteTable(
            [
                route(
                    "/covers/{name}",
                    "/img/{name}",
                    downstream_scheme="https",
                    target={"host": "cdn.example.com", "port": 443},
                )
            ]
        )

        assert (
            table.match("GET", "/covers/dune.jpg").downstream_url
            == "https://cdn.example.com:443/img/dune.jpg"
        )

    def test_placeholder_reused_in_downstream(self):
        table = RouteTable([route("/shelves/{shelf}/books", "/api/shelves/{shelf}")])

        assert table.match("GET", "/shelves/3/books").path == "/api/shelves/3"

    def test_unknown_downstream_placeholder_rejected(self):
        with pytest.raises(RouteTableError, match="absent upstream"):
            RouteTable([route("/books", "/api/books/{id}")])

    def test_len_and_routes(self, route_table: RouteTable, gateway_routes):
        assert len(route_table) == 2
        assert route_table.routes == gateway_routes


class TestRouteTableDocument:
    def test_camel_case_document(self):
        table = RouteTable.from_document(
            {
                "routes": [
                    {
                        "downstreamPathTemplate": "/api/books",
                        "downstreamScheme": "http",
                        "downstreamHostAndPort": {"host": "localhost", "port": 5000},
                        "upstreamPathTemplate": "/books",
                        "upstreamHttpMethod": ["Get"],
                    }
                ]
            }
        )

        assert table.match("GET", "/books").downstream_url == "http://localhost:5000/api/books"

    def test_not_a_mapping(self):
        with pytest.raises(RouteTableError, match="mapping"):
            RouteTable.from_document([])

    def test_missing_routes_key(self):
        with pytest.raises(RouteTableError, match="no 'routes'"):
            RouteTable.from_document({"other": []})

    def test_invalid_route(self):
        with pytest.raises(RouteTableError, match="Invalid route table"):
            RouteTable.from_document({"routes": [{"upstreamPathTemplate": "/books"}]})


class TestLoadRouteTable:
    def test_loads_yaml_with_env_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("BOOKS_API_PORT", raising=False)
        path = tmp_path / "gateway.yaml"
        path.write_text(
            "routes:\n"
            "  - upstreamPathTemplate: /books\n"
            "    upstreamHttpMethod: [GET]\n"
            "    downstreamPathTemplate: /api/books\n"
            "    downstreamHostAndPort:\n"
            "      host: localhost\n"
            "      port: ${BOOKS_API_PORT:-5000}\n",
            encoding="utf-8",
        )

        table = load_route_table(path)

        assert len(table) == 1
        assert table.routes[0].downstream_host_and_port.port == 5000

    def test_loads_json(self, tmp_path: Path):
        path = tmp_path / "gateway.json"
        path.write_text(
            '{"Routes": [{"upstreamPathTemplate": "/books", '
            '"downstreamPathTemplate": "/api/books", '
            '"downstreamHostAndPort": {"host": "localhost", "port": 5000}}]}',
            encoding="utf-8",
        )

        assert len(load_route_table(path)) == 1

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(RouteTableError, match="not found"):
            load_route_table(tmp_path / "absent.yaml")

    def test_shipped_route_table_is_valid(self):
        path = Path(__file__).parents[3] / "gateway.yaml"

        table = load_route_table(path)

        assert table.match("GET", "/books") is not None
        assert table.match("GET", "/books/search").path == "/api/books/search"
