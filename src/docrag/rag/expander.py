"""Query expansion: derive a few search variants from one user query."""

from __future__ import annotations

_MIN_TERM_LENGTH = 4  # tokens must be longer than 3 characters
_MAX_KEY_TERMS = 3
_MIN_KEY_QUERY_LENGTH = 6  # key-terms query must be longer than 5 characters


def key_terms(query: str) -> list[str]:
    """First three whitespace tokens of *query* longer than three characters."""
    return [t for t in query.split() if len(t) >= _MIN_TERM_LENGTH][:_MAX_KEY_TERMS]


def expand_query(query: str) -> list[str]:
    """Return the original query followed by its variants, without duplicates.

    Variants, in order: the lowercase query (if different), the key terms
    joined by spaces (if different from the query and long enough), and the
    key terms quoted and joined with ``OR``.
    """
    expanded = [query]

    lowered = query.lower()
    if lowered != query:
        expanded.append(lowered)

    terms = key_terms(query)
    if terms:
        key_query = " ".join(terms)
        if key_query != query and len(key_query) >= _MIN_KEY_QUERY_LENGTH:
            expanded.append(key_query)
        expanded.append(" OR ".join(f'"{t}"' for t in terms))

    return list(dict.fromkeys(expanded))
