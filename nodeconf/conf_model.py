"""
Typed configuration model over a parsed Document.

The Document stays the single source of truth for what gets written.
ConfigModel keeps an index from (section, key) to the KeyValue entries
defining it, decodes values lazily on read and edits entries in place.
"""

import dataclasses
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from conf_parser import Blank, Block, Document, KeyValue, ParseIssue, Section, parse, parse_value
from conf_writer import format_value
from option_catalog import CATALOG, OptionSpec, ValueType


logger = logging.getLogger(__name__)

FieldValue = Union[bool, int, str, List[str]]

TRUE_WORDS = {"1", "true", "yes"}
FALSE_WORDS = {"0", "false", "no"}
INT_RE = re.compile(r'^[+-]?[0-9]+$')
# Keys must reparse as keys: no '=' or whitespace, no leading '#' or '['
KEY_OK = re.compile(r'^[^=\s#\[][^=\s]*$')
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ConfigError(Exception):
    """Base class for configuration model errors."""


class TypeMismatch(ConfigError):
    def __init__(self, key: str, expected: ValueType, found: Any):
        self.key = key
        self.expected = expected
        self.found = found
        super().__init__(f"{key}: expected {expected.value}, found {found!r}")


class SectionNotFound(ConfigError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Section not found: {section}")


class InvalidValue(ConfigError):
    """Raised for keys, section names or values that cannot be written as one line."""


def decode(spec: OptionSpec, raw_values: List[str]) -> FieldValue:
    """
    Decode raw strings according to an option's value type.

    Args:
        spec: Catalog entry of the option
        raw_values: Values of every entry for the key, in file order

    Returns:
        Decoded value. Single-valued options use the first entry.

    Raises:
        TypeMismatch: If the text does not fit the option's type
    """
    if spec.value_type is ValueType.MULTI_STR:
        return list(raw_values)

    raw = raw_values[0]
    if spec.value_type is ValueType.STR:
        return raw

    if spec.value_type is ValueType.BOOL:
        word = raw.lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise TypeMismatch(spec.key, spec.value_type, raw)

    if not INT_RE.fullmatch(raw):
        raise TypeMismatch(spec.key, spec.value_type, raw)
    number = int(raw, 10)
    if not INT64_MIN <= number <= INT64_MAX:
        raise TypeMismatch(spec.key, spec.value_type, raw)
    return number


def encode(key: str, spec: Optional[OptionSpec], value: FieldValue) -> List[str]:
    """
    Turn a field value into the raw strings to store.

    Keys missing from the catalog accept str, bool, int or a list of str.

    Raises:
        TypeMismatch: If value does not match the option's value type
    """
    expected = spec.value_type if spec else None

    if isinstance(value, bool):
        if expected not in (None, ValueType.BOOL):
            raise TypeMismatch(key, expected, type(value).__name__)
        return ["1" if value else "0"]

    if isinstance(value, int):
        if expected not in (None, ValueType.INT) or not INT64_MIN <= value <= INT64_MAX:
            raise TypeMismatch(key, expected or ValueType.INT, value)
        return [str(value)]

    if isinstance(value, str):
        if expected not in (None, ValueType.STR):
            raise TypeMismatch(key, expected, type(value).__name__)
        return [value]

    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        if expected not in (None, ValueType.MULTI_STR):
            raise TypeMismatch(key, expected, type(value).__name__)
        return list(value)

    raise TypeMismatch(key, expected or ValueType.STR, type(value).__name__)


def _check_line_safe(what: str, text: str) -> None:
    if '\n' in text or '\r' in text:
        raise InvalidValue(f"{what} contains a line break: {text!r}")


def _check_reparses(key: str, value: str) -> None:
    # No escape character exists, so a quoted value must not hide a comment
    parsed, inline_comment, _ = parse_value(format_value(value))
    if parsed != value or inline_comment is not None:
        raise InvalidValue(f"Value for {key} cannot be written without being cut short: {value!r}")


class ConfigModel:
    """Typed, editable view of one configuration Document."""

    def __init__(self, document: Document, catalog: Mapping[str, OptionSpec] = CATALOG):
        self.document = document
        self.catalog = catalog
        self._index: Dict[Tuple[str, str], List[Tuple[Block, KeyValue]]] = {}
        for section in document.sections:
            for key in self._keys_in(section):
                self._refresh(section, key)

    @classmethod
    def from_document(cls, document: Document, catalog: Mapping[str, OptionSpec] = CATALOG) -> "ConfigModel":
        return cls(document, catalog)

    @classmethod
    def from_text(cls, text: str, catalog: Mapping[str, OptionSpec] = CATALOG) -> Tuple["ConfigModel", List[ParseIssue]]:
        document, issues = parse(text)
        return cls(document, catalog), issues

    @classmethod
    def new(cls, catalog: Mapping[str, OptionSpec] = CATALOG) -> "ConfigModel":
        """Model for a configuration file that does not exist yet."""
        return cls(Document.empty(), catalog)

    # Index maintenance

    @staticmethod
    def _keys_in(section: Section) -> List[str]:
        keys = []
        for entry in section.entries:
            if isinstance(entry, KeyValue) and entry.key not in keys:
                keys.append(entry.key)
        return keys

    def _refresh(self, section: Section, key: str) -> None:
        refs = [
            (block, entry)
            for block in section.blocks
            for entry in block.entries
            if isinstance(entry, KeyValue) and entry.key == key
        ]
        if refs:
            self._index[(section.name, key)] = refs
        else:
            self._index.pop((section.name, key), None)

    def _require_section(self, name: str) -> Section:
        section = self.document.section(name)
        if section is None:
            raise SectionNotFound(name)
        return section

    def _ensure_section(self, name: str) -> Section:
        section = self.document.section(name)
        if section is not None:
            return section
        if not name or name != name.strip() or ']' in name:
            raise InvalidValue(f"Invalid section name: {name!r}")
        _check_line_safe("Section name", name)
        logger.debug(f"Creating section [{name}]")
        self.document.add_block(name, header=f"[{name}]")
        return self.document.section(name)

    @staticmethod
    def _insert_point(block: Block) -> int:
        # After the last key, or after the last non-blank line if there are no keys
        for index in range(len(block.entries) - 1, -1, -1):
            if isinstance(block.entries[index], KeyValue):
                return index + 1
        index = len(block.entries)
        while index > 0 and isinstance(block.entries[index - 1], Blank):
            index -= 1
        return index

    @staticmethod
    def _drop(section: Section, entries: List[KeyValue]) -> None:
        doomed = {id(entry) for entry in entries}
        for block in section.blocks:
            block.entries[:] = [e for e in block.entries if id(e) not in doomed]

    # Public API

    def sections(self) -> List[str]:
        return [section.name for section in self.document.sections]

    def keys(self, section: str) -> List[str]:
        return self._keys_in(self._require_section(section))

    def raw_values(self, section: str, key: str) -> List[str]:
        """Stored strings for key in file order, without decoding."""
        self._require_section(section)
        return [entry.value for _, entry in self._index.get((section, key), [])]

    def get(self, section: str, key: str) -> Optional[FieldValue]:
        """
        Read a typed value.

        Args:
            section: Section name ("default" for lines before any header)
            key: Option name

        Returns:
            Decoded value, or None if the key is not set in the section.
            Keys unknown to the catalog return their first raw value.

        Raises:
            SectionNotFound: If the section does not exist
            TypeMismatch: If the stored text does not fit the option's type
        """
        self._require_section(section)
        refs = self._index.get((section, key))
        if not refs:
            return None

        raw_values = [entry.value for _, entry in refs]
        spec = self.catalog.get(key)
        if spec is None:
            return raw_values[0]
        return decode(spec, raw_values)

    def value_or_default(self, section: str, key: str) -> Optional[FieldValue]:
        """Like get, falling back to the catalog default when the key is unset."""
        value = self.get(section, key)
        if value is not None:
            return value
        spec = self.catalog.get(key)
        if spec is None:
            return None
        return spec.default

    def set(self, section: str, key: str, value: FieldValue) -> None:
        """
        Write a typed value, creating the section if needed.

        Single values replace the first existing entry in place, keeping
        its position and inline comment, or are added to the end of the
        section. Lists replace every existing entry for the key with one
        contiguous run at the position of the first old entry. An empty
        list removes the key.

        Raises:
            TypeMismatch: If value does not match the option's type
            InvalidValue: If key, section or value cannot be written on one line,
                or the value would not read back unchanged
        """
        if not KEY_OK.fullmatch(key):
            raise InvalidValue(f"Invalid key: {key!r}")

        spec = self.catalog.get(key)
        raw_values = encode(key, spec, value)
        for raw in raw_values:
            _check_line_safe(f"Value for {key}", raw)
            _check_reparses(key, raw)

        target = self._ensure_section(section)
        refs = self._index.get((section, key), [])
        newline = self.document.newline

        if isinstance(value, (list, tuple)):
            new_entries = [KeyValue(key, raw, eol=newline) for raw in raw_values]
            if refs:
                block, first = refs[0]
                position = next(i for i, e in enumerate(block.entries) if e is first)
                self._drop(target, [entry for _, entry in refs])
                block.entries[position:position] = new_entries
            else:
                block = target.blocks[-1]
                position = self._insert_point(block)
                block.entries[position:position] = new_entries
        elif refs:
            _, entry = refs[0]
            entry.value = raw_values[0]
            entry.raw = None
        else:
            block = target.blocks[-1]
            block.entries.insert(self._insert_point(block), KeyValue(key, raw_values[0], eol=newline))

        self._refresh(target, key)
        logger.debug(f"Set [{section}] {key}")

    def remove(self, section: str, key: str) -> None:
        """
        Delete every entry for key in section. No-op if the key is absent.

        Raises:
            SectionNotFound: If the section does not exist
        """
        target = self._require_section(section)
        refs = self._index.get((section, key))
        if not refs:
            return
        self._drop(target, [entry for _, entry in refs])
        self._refresh(target, key)
        logger.debug(f"Removed [{section}] {key} ({len(refs)} entries)")

    def unknown_entries(self, section: str) -> Tuple[KeyValue, ...]:
        """Copies of the entries whose key is not in the catalog."""
        target = self.document.section(section)
        if target is None:
            return ()
        return tuple(
            dataclasses.replace(entry)
            for entry in target.entries
            if isinstance(entry, KeyValue) and entry.key not in self.catalog
        )
