"""Flatten nested parameter maps into bracketed query strings and back.

The nesting rules follow the usual web-framework convention:

    a[b][c]=v    ->  {"a": {"b": {"c": "v"}}}
    a[]=x&a[]=y  ->  {"a": ["x", "y"]}
    a[0]=x       ->  {"a": {"0": "x"}}

The last form is why list values come back as indexed maps; the URL codec
repairs them with ``indexed_map_to_list``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib import resources
from typing import Any
from urllib.parse import parse_qsl, urlencode

from lark import Lark, Token, Transformer, UnexpectedInput

from live_filter.filters.coerce import to_wire

logger = logging.getLogger(__name__)


def _load_grammar() -> str:
    """Load the Lark grammar from the package resources."""
    return resources.files("live_filter.filters").joinpath("grammar.lark").read_text()


_GRAMMAR_TEXT = _load_grammar()

_parser = Lark(
    _GRAMMAR_TEXT,
    parser="earley",
    ambiguity="resolve",
)


class _KeyTransformer(Transformer):
    """Turn a parsed key into its path: names, with None for ``[]``."""

    def start(self, items: list[Any]) -> list[str | None]:
        return list(items)

    def segment(self, items: list[Any]) -> str | None:
        return items[0] if items else None

    def KEY(self, token: Token) -> str:
        return str(token)


_transformer = _KeyTransformer()


def parse_key(key: str) -> list[str | None]:
    """Split ``a[b][]`` into ``["a", "b", None]``.

    A key that doesn't parse (unbalanced brackets, text after a bracket) is
    returned whole as a single flat name.
    """
    try:
        return _transformer.transform(_parser.parse(key))
    except UnexpectedInput:
        logger.debug("Keeping malformed query key %r as a flat key", key)
        return [key]


def _assign(container: dict[str, Any], path: list[str | None], value: str) -> None:
    name, rest = path[0], path[1:]
    if not rest:
        container[name] = value
        return

    if rest[0] is None:
        items = container.get(name)
        if not isinstance(items, list):
            items = []
            container[name] = items
        if len(rest) > 1 and rest[1] is not None:
            item: dict[str, Any] = {}
            items.append(item)
            _assign(item, rest[1:], value)
        else:
            items.append(value)
        return

    child = container.get(name)
    if not isinstance(child, dict):
        child = {}
        container[name] = child
    _assign(child, rest, value)


def parse_query_string(query: str) -> dict[str, Any]:
    """Parse a query string into a nested parameter map.

    Args:
        query: The raw query string, with or without a leading ``?``.

    Returns:
        The nested map.  Values are always strings; later keys overwrite
        earlier scalar ones.
    """
    params: dict[str, Any] = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        if not key:
            continue
        _assign(params, parse_key(key), value)
    return params


def _flatten(key: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _flatten(f"{key}[{sub_key}]", sub_value, pairs)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{key}[{index}]", item, pairs)
    else:
        pairs.append((key, str(to_wire(value))))


def flatten_params(params: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Flatten a nested map into ``(bracketed_key, value)`` pairs.

    Lists are written with positional indexes, ``None`` values are left out.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten(str(key), value, pairs)
    return pairs


def encode_query(params: Mapping[str, Any]) -> str:
    """Percent-encode a nested map as a query string (no leading ``?``)."""
    return urlencode(flatten_params(params))
