"""
bitcoin.conf serialization module.

Writes a Document back to text. Untouched lines are emitted exactly as
they were read; edited or new entries get the canonical key=value form.
"""

from conf_parser import Blank, Comment, Document, KeyValue, RawEntry, Unparseable


def needs_quoting(value: str) -> bool:
    """
    Check whether a value would not survive a reparse unquoted.

    True when the value contains '#', has leading or trailing whitespace,
    or is itself wrapped in double quotes.
    """
    if '#' in value:
        return True
    if value != value.strip():
        return True
    return len(value) >= 2 and value[0] == '"' and value[-1] == '"'


def format_value(value: str) -> str:
    if needs_quoting(value):
        return f'"{value}"'
    return value


def render_entry(entry: RawEntry) -> str:
    """Return the line text for one entry, without its line ending."""
    if isinstance(entry, KeyValue):
        if entry.raw is not None:
            return entry.raw
        return f"{entry.key}={format_value(entry.value)}{entry.inline_comment or ''}"
    if isinstance(entry, Comment):
        return entry.text
    if isinstance(entry, Blank):
        return entry.text
    if isinstance(entry, Unparseable):
        return entry.raw_text
    raise TypeError(f"Unknown entry type: {type(entry).__name__}")


def serialize(doc: Document) -> str:
    """
    Serialize a Document to configuration text.

    Blocks are written in physical order. A line stored without a line
    ending (the unterminated last line of the source) gets the document's
    newline when something has been placed after it.

    Args:
        doc: Document to serialize

    Returns:
        Configuration file text
    """
    lines = []
    for block in doc.blocks():
        if block.header is not None:
            lines.append((block.header, block.eol))
        for entry in block.entries:
            lines.append((render_entry(entry), entry.eol))

    last = len(lines) - 1
    parts = []
    for index, (text, eol) in enumerate(lines):
        if not eol and index != last:
            eol = doc.newline
        parts.append(text + eol)
    return "".join(parts)
