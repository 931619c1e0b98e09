"""
Unit tests for the typed configuration model.

Tests decoding of every value type, in-place edits, multi-value
replacement, removal and preservation of keys the catalog does not know.
"""

import unittest
from pathlib import Path
import sys

# Add nodeconf directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'nodeconf'))

from conf_model import ConfigModel, InvalidValue, SectionNotFound, TypeMismatch
from conf_parser import parse
from conf_writer import serialize
from option_catalog import ValueType


def model_of(text):
    model, _ = ConfigModel.from_text(text)
    return model


class TestBoolDecoding(unittest.TestCase):
    """Tests for reading Bool options."""

    def test_true_words(self):
        """Test that 1/true/yes decode to True in any case."""
        for raw in ("1", "true", "yes", "TRUE", "Yes"):
            self.assertIs(model_of(f"txindex={raw}\n").get("default", "txindex"), True, raw)

    def test_false_words(self):
        """Test that 0/false/no decode to False in any case."""
        for raw in ("0", "false", "no", "NO", "False"):
            self.assertIs(model_of(f"txindex={raw}\n").get("default", "txindex"), False, raw)

    def test_other_text_is_mismatch(self):
        """Test that anything else raises TypeMismatch with details."""
        with self.assertRaises(TypeMismatch) as ctx:
            model_of("txindex=maybe\n").get("default", "txindex")
        self.assertEqual(ctx.exception.key, "txindex")
        self.assertEqual(ctx.exception.expected, ValueType.BOOL)
        self.assertEqual(ctx.exception.found, "maybe")

    def test_empty_value_is_mismatch(self):
        """Test that an empty value is not a boolean."""
        with self.assertRaises(TypeMismatch):
            model_of("txindex=\n").get("default", "txindex")


class TestIntDecoding(unittest.TestCase):
    """Tests for reading Int options."""

    def test_signed_decimal(self):
        """Test plain, negative and explicitly positive numbers."""
        self.assertEqual(model_of("dbcache=450\n").get("default", "dbcache"), 450)
        self.assertEqual(model_of("par=-1\n").get("default", "par"), -1)
        self.assertEqual(model_of("par=+2\n").get("default", "par"), 2)

    def test_non_numeric_is_mismatch(self):
        """Test that text with letters raises TypeMismatch."""
        with self.assertRaises(TypeMismatch):
            model_of("dbcache=12abc\n").get("default", "dbcache")

    def test_out_of_range_is_mismatch(self):
        """Test that values beyond 64 bits are rejected."""
        with self.assertRaises(TypeMismatch):
            model_of("dbcache=9223372036854775808\n").get("default", "dbcache")


class TestStringDecoding(unittest.TestCase):
    """Tests for Str and MultiStr options and unknown keys."""

    def test_str_verbatim(self):
        """Test that strings pass through unchanged."""
        self.assertEqual(model_of("rpcuser=alice\n").get("default", "rpcuser"), "alice")

    def test_multi_str_collects_in_order(self):
        """Test that repeated keys are collected in file order."""
        model = model_of("addnode=a\ntxindex=1\naddnode=b\n")
        self.assertEqual(model.get("default", "addnode"), ["a", "b"])

    def test_first_single_value_wins(self):
        """Test that a repeated single-valued key reads its first occurrence."""
        self.assertEqual(model_of("dbcache=100\ndbcache=200\n").get("default", "dbcache"), 100)

    def test_unknown_key_returns_raw(self):
        """Test that unknown keys read as their first raw string."""
        self.assertEqual(model_of("foo=bar\nfoo=baz\n").get("default", "foo"), "bar")

    def test_absent_key(self):
        """Test that a missing key reads as None."""
        self.assertIsNone(model_of("server=1\n").get("default", "txindex"))

    def test_missing_section(self):
        """Test that reading a nonexistent section raises SectionNotFound."""
        with self.assertRaises(SectionNotFound):
            model_of("server=1\n").get("signet", "txindex")


class TestSet(unittest.TestCase):
    """Tests for ConfigModel.set."""

    def test_set_then_get_every_type(self):
        """Test that each value type reads back what was written."""
        model = ConfigModel.new()
        values = {
            "txindex": True,
            "dbcache": 1234,
            "rpcuser": "alice",
            "addnode": ["a", "b"],
        }
        for key, value in values.items():
            model.set("regtest", key, value)
        for key, value in values.items():
            self.assertEqual(model.get("regtest", key), value, key)

    def test_replace_in_place_keeps_comment(self):
        """Test that editing keeps the entry's position and inline comment."""
        model = model_of("# top\ndbcache=100  # MiB\nserver=1\n")
        model.set("default", "dbcache", 4000)
        self.assertEqual(serialize(model.document), "# top\ndbcache=4000  # MiB\nserver=1\n")

    def test_new_key_goes_after_last_key(self):
        """Test that new keys stay ahead of the blank line before the next header."""
        model = model_of("server=1\n\n[test]\nport=1\n")
        model.set("default", "txindex", True)
        self.assertEqual(serialize(model.document), "server=1\ntxindex=1\n\n[test]\nport=1\n")

    def test_multi_str_replaced_at_first_position(self):
        """Test that a MultiStr set leaves one contiguous block at the first entry's spot."""
        model = model_of("addnode=x\nserver=1\naddnode=y\nlisten=1\n")
        model.set("default", "addnode", ["a", "b", "c"])

        self.assertEqual(model.get("default", "addnode"), ["a", "b", "c"])
        self.assertEqual(
            serialize(model.document),
            "addnode=a\naddnode=b\naddnode=c\nserver=1\nlisten=1\n",
        )

    def test_multi_str_across_repeated_sections(self):
        """Test replacement when the key is spread over repeated headers."""
        model = model_of("[test]\naddnode=x\n[main]\n[test]\naddnode=y\n")
        model.set("test", "addnode", ["z"])
        self.assertEqual(serialize(model.document), "[test]\naddnode=z\n[main]\n[test]\n")

    def test_multi_str_appended_when_absent(self):
        """Test that a new MultiStr key is appended as one run."""
        model = model_of("server=1\n")
        model.set("default", "addnode", ["a", "b"])
        self.assertEqual(serialize(model.document), "server=1\naddnode=a\naddnode=b\n")

    def test_new_key_goes_above_trailing_comments(self):
        """Test that trailing comments and blank separators stay below new keys."""
        model = model_of("server=1\n# trailing note\n\n[test]\nrpcport=1\n")
        model.set("default", "txindex", True)
        self.assertEqual(serialize(model.document),
                         "server=1\ntxindex=1\n# trailing note\n\n[test]\nrpcport=1\n")

        model = model_of("# only notes\n\n[test]\n")
        model.set("default", "listen", True)
        self.assertEqual(serialize(model.document), "# only notes\nlisten=1\n\n[test]\n")

    def test_empty_list_removes(self):
        """Test that setting an empty list removes the key."""
        model = model_of("addnode=a\nserver=1\n")
        model.set("default", "addnode", [])
        self.assertIsNone(model.get("default", "addnode"))
        self.assertEqual(serialize(model.document), "server=1\n")

    def test_crlf_file_gets_crlf_entries(self):
        """Test that new lines use the file's newline."""
        model = model_of("a=1\r\n")
        model.set("default", "server", True)
        self.assertEqual(serialize(model.document), "a=1\r\nserver=1\r\n")

    def test_unknown_key_values(self):
        """Test that unknown keys accept str, int, bool and lists."""
        model = ConfigModel.new()
        model.set("default", "custom", 7)
        model.set("default", "flag", False)
        model.set("default", "many", ["x", "y"])
        self.assertEqual(model.raw_values("default", "custom"), ["7"])
        self.assertEqual(model.raw_values("default", "flag"), ["0"])
        self.assertEqual(model.raw_values("default", "many"), ["x", "y"])

    def test_type_mismatch_on_set(self):
        """Test that values of the wrong type are refused."""
        model = ConfigModel.new()
        with self.assertRaises(TypeMismatch):
            model.set("default", "txindex", "1")
        with self.assertRaises(TypeMismatch):
            model.set("default", "dbcache", True)
        with self.assertRaises(TypeMismatch):
            model.set("default", "addnode", "10.0.0.1")
        with self.assertRaises(TypeMismatch):
            model.set("default", "rpcuser", 5)

    def test_invalid_values(self):
        """Test that keys, values and sections must fit on one line."""
        model = ConfigModel.new()
        with self.assertRaises(InvalidValue):
            model.set("default", "rpcuser", "a\nb")
        with self.assertRaises(InvalidValue):
            model.set("default", "bad key", "x")
        with self.assertRaises(InvalidValue):
            model.set("default", "#hidden", "x")
        with self.assertRaises(InvalidValue):
            model.set("a]b", "server", True)

    def test_value_that_would_be_cut_at_hash(self):
        """Test that quotes plus '#' are rejected instead of truncated on reload."""
        model = ConfigModel.new()
        with self.assertRaises(InvalidValue):
            model.set("default", "rpcpassword", 'pa"ss#word')
        with self.assertRaises(InvalidValue):
            model.set("default", "rpcauth", ['ok', 'x" #y'])
        self.assertIsNone(model.get("default", "rpcpassword"))

        model.set("default", "rpcpassword", 'pa"ss')
        model.set("default", "rpcuser", "a#b")
        reloaded, _ = ConfigModel.from_text(serialize(model.document))
        self.assertEqual(reloaded.get("default", "rpcpassword"), 'pa"ss')
        self.assertEqual(reloaded.get("default", "rpcuser"), "a#b")


class TestRemove(unittest.TestCase):
    """Tests for ConfigModel.remove."""

    def test_remove_all_entries(self):
        """Test that every entry of the key goes, nothing else."""
        model = model_of("# nodes\naddnode=a\nserver=1\naddnode=b\n")
        model.remove("default", "addnode")
        self.assertIsNone(model.get("default", "addnode"))
        self.assertEqual(serialize(model.document), "# nodes\nserver=1\n")

    def test_remove_absent_key_is_noop(self):
        """Test that removing a missing key changes nothing."""
        text = "server=1\n"
        model = model_of(text)
        model.remove("default", "txindex")
        self.assertEqual(serialize(model.document), text)

    def test_remove_missing_section(self):
        """Test that removing from a nonexistent section raises SectionNotFound."""
        with self.assertRaises(SectionNotFound):
            model_of("").remove("test", "server")


class TestUnknownEntries(unittest.TestCase):
    """Tests for unknown key handling."""

    def test_unknown_entries_per_section(self):
        """Test that only keys outside the catalog are listed."""
        model = model_of("foo=1\ntxindex=1\n[test]\nbar=2\n")
        self.assertEqual([e.key for e in model.unknown_entries("default")], ["foo"])
        self.assertEqual([e.key for e in model.unknown_entries("test")], ["bar"])
        self.assertEqual(model.unknown_entries("signet"), ())

    def test_unknown_entries_are_copies(self):
        """Test that changing a returned entry leaves the model alone."""
        model = model_of("foo=1\n")
        model.unknown_entries("default")[0].value = "changed"
        self.assertEqual(model.get("default", "foo"), "1")

    def test_unknown_key_survives_unrelated_edit(self):
        """Test that foreign keys keep their value and position."""
        model = model_of("mystery=42 # keep\ntxindex=0\n")
        model.set("default", "txindex", True)
        self.assertEqual(serialize(model.document), "mystery=42 # keep\ntxindex=1\n")


class TestHelpers(unittest.TestCase):
    """Tests for listing and default helpers."""

    def test_sections_and_keys(self):
        """Test section and key listings in file order."""
        model = model_of("server=1\naddnode=a\naddnode=b\n[test]\nport=1\n")
        self.assertEqual(model.sections(), ["default", "test"])
        self.assertEqual(model.keys("default"), ["server", "addnode"])

    def test_value_or_default(self):
        """Test fallback to catalog defaults for unset options."""
        model = model_of("server=1\n")
        self.assertEqual(model.value_or_default("default", "dbcache"), 450)
        self.assertIs(model.value_or_default("default", "server"), True)
        self.assertIsNone(model.value_or_default("default", "addnode"))
        self.assertIsNone(model.value_or_default("default", "custom"))

    def test_from_document(self):
        """Test building a model from an already parsed document."""
        doc, _ = parse("rpcport=8332\n")
        model = ConfigModel.from_document(doc)
        self.assertIs(model.document, doc)
        self.assertEqual(model.get("default", "rpcport"), 8332)


if __name__ == '__main__':
    unittest.main()
