import re

_SEPARATOR_RE = re.compile(r"[_\s]")


def normalize_identifier(name: str) -> str:
    """Lowercase a column/field name and strip underscores and whitespace.

    `Order Date`, `order_date` and `ORDERDATE` all normalize to `orderdate`.
    """
    return _SEPARATOR_RE.sub("", name.lower())
