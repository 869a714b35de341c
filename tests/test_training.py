"""Tests for the shared training data formats."""

import pytest

from groundtruth.training import merge_entries, parse_csv, parse_json, to_csv


class TestParseCsv:

    def test_rows(self):
        content = 'hello,greeting,polite\n"hi, there",greeting\n'
        assert parse_csv(content) == [
            {"text": "hello", "classes": ["greeting", "polite"]},
            {"text": "hi, there", "classes": ["greeting"]},
        ]

    def test_skips_blank_rows_and_cells(self):
        assert parse_csv("\n , \nbye,,farewell,\n") == [{"text": "bye", "classes": ["farewell"]}]

    def test_unused_class_row(self):
        assert parse_csv(",orphan\n") == [{"text": "", "classes": ["orphan"]}]


class TestParseJson:

    def test_entries(self):
        data = {"training_data": [{"text": "hello", "classes": ["greeting"]}, {"text": "bye", "classes": "farewell"}]}
        assert parse_json(data) == [
            {"text": "hello", "classes": ["greeting"]},
            {"text": "bye", "classes": ["farewell"]},
        ]

    @pytest.mark.parametrize("data", [[], {"training_data": "x"}, {"training_data": ["x"]}])
    def test_rejects(self, data):
        with pytest.raises(ValueError):
            parse_json(data)


def test_merge_entries_combines_duplicate_texts():
    merged = merge_entries([
        {"text": "hello", "classes": ["greeting"]},
        {"text": "bye", "classes": ["farewell"]},
        {"text": "hello", "classes": ["polite", "greeting"]},
        {"text": "", "classes": ["orphan"]},
    ])

    assert merged["classes"] == ["greeting", "farewell", "polite", "orphan"]
    assert merged["text"] == [
        {"text": "hello", "classes": ["greeting", "polite"]},
        {"text": "bye", "classes": ["farewell"]},
    ]


class TestToCsv:

    def test_skips_unlabelled_and_quotes(self):
        entries = [{"text": "hi, there", "classes": ["greeting"]}, {"text": "lonely", "classes": []}]
        assert to_csv(entries) == '"hi, there",greeting\n'

    def test_unused_classes_on_last_row(self):
        entries = [{"text": "hello", "classes": ["greeting"]}]
        csv_text = to_csv(entries, ["greeting", "orphan", "spare"])
        assert csv_text == "hello,greeting\n,orphan,spare\n"
        assert merge_entries(parse_csv(csv_text))["classes"] == ["greeting", "orphan", "spare"]
