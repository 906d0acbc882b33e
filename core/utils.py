"""Assorted utility helpers."""


def sanitize_numeric_input(value):
    """Parse a form value into a float.

    ``None`` and blank strings give ``None``. Currency symbols, thousands
    separators, percent signs and spaces are stripped from strings; anything
    still unparseable gives ``nan`` so callers can report it.
    """
    if value is None:
        return None
    if isinstance(value, (bool, int, float)):
        return float(value)
    text = str(value)
    for ch in "$,% ":
        text = text.replace(ch, "")
    if text == "":
        return None
    try:
        return float(text)
    except ValueError:
        return float("nan")


def is_blank(value):
    return value is None or (isinstance(value, str) and value.strip() == "")
