"""
bitcoin.conf parsing module.

Turns raw configuration text into a Document: an ordered list of
sections, each holding the entries found under its headers. Parsing is
total over arbitrary text. Lines that cannot be understood are kept as
Unparseable entries and reported as advisory ParseIssues, never dropped.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union


logger = logging.getLogger(__name__)

DEFAULT_SECTION = "default"

HEADER_RE = re.compile(r'^\s*\[(.+)\]\s*$')
KEY_VALUE_RE = re.compile(r'^\s*([^=\s]+)\s*=(.*)$')


@dataclass
class KeyValue:
    key: str
    value: str
    inline_comment: Optional[str] = None
    # Original line text; None once the entry has been edited
    raw: Optional[str] = None
    eol: str = "\n"


@dataclass
class Comment:
    text: str
    eol: str = "\n"


@dataclass
class Blank:
    text: str = ""
    eol: str = "\n"


@dataclass
class Unparseable:
    raw_text: str
    eol: str = "\n"


RawEntry = Union[KeyValue, Comment, Blank, Unparseable]


@dataclass
class Block:
    """
    Entries following one physical section header.

    A section declared more than once owns one block per header, which
    lets the writer reproduce the original physical layout.
    """

    name: str
    header: Optional[str]
    entries: List[RawEntry] = field(default_factory=list)
    order: int = 0
    eol: str = "\n"


@dataclass
class Section:
    name: str
    blocks: List[Block] = field(default_factory=list)

    @property
    def entries(self) -> List[RawEntry]:
        """All entries of the section in declaration order."""
        return [entry for block in self.blocks for entry in block.entries]


@dataclass
class Document:
    sections: List[Section] = field(default_factory=list)
    newline: str = "\n"

    @classmethod
    def empty(cls) -> "Document":
        doc = cls()
        doc.add_block(DEFAULT_SECTION, header=None)
        return doc

    def section(self, name: str) -> Optional[Section]:
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def add_block(self, name: str, header: Optional[str], eol: Optional[str] = None) -> Block:
        """
        Append a block to the named section, creating the section if needed.

        Args:
            name: Section name
            header: Header line text, or None for the implicit leading block
            eol: Line ending of the header line (defaults to the document's)

        Returns:
            The new block, placed after every existing block
        """
        order = max((b.order for b in self.blocks()), default=-1) + 1
        block = Block(name, header, order=order, eol=self.newline if eol is None else eol)

        section = self.section(name)
        if section is None:
            section = Section(name)
            self.sections.append(section)
        section.blocks.append(block)
        return block

    def blocks(self) -> List[Block]:
        """All blocks in physical file order."""
        return sorted((b for s in self.sections for b in s.blocks), key=lambda b: b.order)


@dataclass(frozen=True)
class ParseIssue:
    line: int
    message: str


def split_lines(text: str) -> Iterator[Tuple[str, str]]:
    """
    Split text into (line, line_ending) pairs.

    A CR before the LF is kept in the line ending. The final line has an
    empty line ending when the text does not end with a newline.
    """
    parts = text.split("\n")
    last = len(parts) - 1
    for index, part in enumerate(parts):
        if index == last:
            if part:
                yield part, ""
            return
        if part.endswith("\r"):
            yield part[:-1], "\r\n"
        else:
            yield part, "\n"


def _find_comment(rest: str) -> Tuple[Optional[int], bool]:
    """Return (index of the first '#' outside quotes, quote left open)."""
    in_quotes = False
    for index, char in enumerate(rest):
        if char == '"':
            in_quotes = not in_quotes
        elif char == '#' and not in_quotes:
            return index, False
    return None, in_quotes


def unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def parse_value(rest: str) -> Tuple[str, Optional[str], List[str]]:
    """
    Split the text after '=' into value and inline comment.

    Args:
        rest: Everything following the first '=' of a line

    Returns:
        Tuple of (value, inline_comment, problems). The inline comment
        keeps the whitespace in front of '#' so edits can reuse it.
    """
    problems = []
    comment_at, open_quote = _find_comment(rest)
    if open_quote:
        problems.append("unterminated quote in value")

    if comment_at is None:
        return unquote(rest.strip()), None, problems

    value_part = rest[:comment_at]
    value = value_part.strip()
    split_at = len(value_part.rstrip())
    if value and split_at == comment_at:
        problems.append("'#' directly after value treated as inline comment")
    return unquote(value), rest[split_at:], problems


def parse(text: str) -> Tuple[Document, List[ParseIssue]]:
    """
    Parse bitcoin.conf text into a Document.

    Args:
        text: Full file content

    Returns:
        Tuple of (document, issues). Issues are advisory only.

    Example:
        doc, issues = parse(path.read_text())
        for issue in issues:
            logging.warning(f"line {issue.line}: {issue.message}")
    """
    doc = Document.empty()
    issues = []
    current = doc.blocks()[0]
    newline_seen = False

    for number, (line, eol) in enumerate(split_lines(text), start=1):
        if eol and not newline_seen:
            doc.newline = eol
            newline_seen = True

        stripped = line.strip()
        if not stripped:
            current.entries.append(Blank(line, eol))
            continue

        if stripped.startswith('#'):
            current.entries.append(Comment(line, eol))
            continue

        header = HEADER_RE.match(line)
        if header:
            name = header.group(1).strip()
            if not name:
                issues.append(ParseIssue(number, "empty section name"))
                current.entries.append(Unparseable(line, eol))
                continue
            if doc.section(name) is not None and name != DEFAULT_SECTION:
                issues.append(ParseIssue(number, f"section [{name}] declared again, merging"))
            current = doc.add_block(name, header=line, eol=eol)
            continue

        match = KEY_VALUE_RE.match(line)
        if match:
            value, inline_comment, problems = parse_value(match.group(2))
            for problem in problems:
                issues.append(ParseIssue(number, problem))
            current.entries.append(KeyValue(match.group(1), value, inline_comment, raw=line, eol=eol))
            continue

        issues.append(ParseIssue(number, "unparseable line kept verbatim"))
        current.entries.append(Unparseable(line, eol))

    if issues:
        logger.debug(f"Parsed configuration with {len(issues)} issue(s)")
    return doc, issues
