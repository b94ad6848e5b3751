"""Routing — path templates, the compiled route table, and handler registration."""

from finch.routing.builder import SUPPORTED_VERBS, RouteTableBuilder, build_route_table
from finch.routing.handlers import HandlerTable
from finch.routing.route import CompiledRoute, PathSegment, RouteMatch
from finch.routing.router import RouteTable, join_paths, parse_path, specificity

__all__ = [
    "SUPPORTED_VERBS",
    "CompiledRoute",
    "HandlerTable",
    "PathSegment",
    "RouteMatch",
    "RouteTable",
    "RouteTableBuilder",
    "build_route_table",
    "join_paths",
    "parse_path",
    "specificity",
]
