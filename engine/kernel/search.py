"""
Vivarium Kernel — Search

Free-text search over a per-record blob.

The blob is the lower-cased, space-joined text of the configured fields
(list fields contribute every element). A query matches when every
whitespace-separated token is a substring of the blob. Token order and
adjacency do not matter; a blank query matches everything.

Blobs are rebuilt on each pass. Collections are laboratory-sized.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from engine.kernel.fields import FieldAccessor, text_of
from engine.kernel.types import Record, SearchSpec


def tokenize(query: str) -> list[str]:
    """Split on whitespace, drop empties, lower-case."""
    return [token.lower() for token in query.split() if token]


def build_blob(record: Record, field_names: Sequence[str], accessor: FieldAccessor) -> str:
    """Concatenate the named fields of `record` into one lower-cased blob."""
    parts = [text_of(accessor.raw(record, name)) for name in field_names]
    return " ".join(parts).lower()


def blob_matches(blob: str, query: str) -> bool:
    """AND-of-substrings: every token must appear somewhere in the blob."""
    return all(token in blob for token in tokenize(query))


def search_records(
    records: Iterable[Record],
    spec: SearchSpec,
    accessor: FieldAccessor,
) -> list[Record]:
    """Keep the records whose blob matches the query, preserving order."""
    if spec.is_blank():
        return list(records)
    fields = spec.fields or accessor.table.search_fields
    tokens = tokenize(spec.query)
    kept = []
    for record in records:
        blob = build_blob(record, fields, accessor)
        if all(token in blob for token in tokens):
            kept.append(record)
    return kept
