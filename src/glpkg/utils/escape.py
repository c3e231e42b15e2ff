from urllib.parse import quote


def path_escape(segment: str) -> str:
    """escape a string so it can be placed inside a single URL path segment."""
    # nothing is safe: '/' must become %2F so namespaced paths stay one segment
    escaped = quote(segment, safe="")
    # '.' and '..' would be collapsed as dot segments by url normalization
    if segment and not segment.strip("."):
        escaped = escaped.replace(".", "%2E")
    return escaped
