"""Builder for IGDB's text query language (apicalypse)."""

from collections.abc import Iterable, Sequence


def escape_search(text: str) -> str:
    """Escape a search term for use inside double quotes."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def build_query(
    fields: Iterable[str],
    *,
    search: str | None = None,
    ids: Sequence[int] | None = None,
    limit: int | None = None,
) -> str:
    """
    Build a query body for an IGDB endpoint.

    Example:
        >>> build_query(["id", "name"], ids=[4, 5], limit=2)
        'fields id,name; where id = (4,5); limit 2;'
    """
    clauses = [f"fields {','.join(fields)};"]
    if search is not None:
        clauses.append(f'search "{escape_search(search)}";')
    if ids:
        clauses.append(f"where id = ({','.join(str(i) for i in ids)});")
    if limit is not None:
        clauses.append(f"limit {limit};")
    return " ".join(clauses)
