import pytest

from merged_blocks_checker.keys import FixedWidthDecimalKeyParser


class TestFixedWidthDecimalKeyParser:
    def test_parse_plain_key(self):
        assert FixedWidthDecimalKeyParser().parse("0000012300") == 12300

    def test_parse_with_extension(self):
        assert FixedWidthDecimalKeyParser().parse("0000012300.jsonl") == 12300

    def test_parse_with_directory(self):
        assert FixedWidthDecimalKeyParser().parse("merged/0000000100.dbin.zst") == 100

    def test_non_bundle_key(self):
        parser = FixedWidthDecimalKeyParser()
        assert parser.parse("README.md") is None
        assert parser.parse("12345") is None

    def test_longer_digit_runs_are_not_bundle_keys(self):
        assert FixedWidthDecimalKeyParser().parse("00000001000") is None

    def test_format(self):
        assert FixedWidthDecimalKeyParser().format(100) == "0000000100"
        assert FixedWidthDecimalKeyParser(width=6, extension=".jsonl").format(42) == "000042.jsonl"

    def test_format_then_parse(self):
        parser = FixedWidthDecimalKeyParser(extension=".jsonl")
        assert parser.parse(parser.format(987_654_300)) == 987_654_300

    def test_invalid(self):
        with pytest.raises(ValueError):
            FixedWidthDecimalKeyParser(width=0)
        with pytest.raises(ValueError):
            FixedWidthDecimalKeyParser().format(-1)
