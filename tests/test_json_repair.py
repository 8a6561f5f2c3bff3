"""Tests for JSON repair utilities."""

from stepflow.core.json_repair import (
    extract_json_object,
    parse_json_response,
    repair_json,
    repair_single_quotes,
    repair_trailing_commas,
    repair_unquoted_keys,
)


class TestExtract:
    def test_bare_object_in_prose(self):
        assert extract_json_object('Sure! {"a": 1} Hope that helps.') == '{"a": 1}'

    def test_code_fence_wins(self):
        text = 'Ignore {this}\n```json\n{"a": 2}\n```'
        assert extract_json_object(text) == '{"a": 2}'

    def test_no_braces(self):
        assert extract_json_object("no json here") is None


class TestRepair:
    def test_unquoted_keys(self):
        assert repair_unquoted_keys("{score: 7, feedback: 1}") == '{"score": 7, "feedback": 1}'

    def test_single_quotes(self):
        assert repair_single_quotes("{'a': 'b'}") == '{"a": "b"}'
        assert repair_single_quotes('{"a": "it\'s"}') == '{"a": "it\'s"}'

    def test_trailing_commas(self):
        assert repair_trailing_commas('{"a": [1, 2,],}') == '{"a": [1, 2]}'

    def test_repair_json(self):
        assert repair_json("{score: 7, 'feedback': 'ok',}") == {"score": 7, "feedback": "ok"}
        assert repair_json("[1, 2]") is None
        assert repair_json("{{{") is None


def test_parse_json_response():
    assert parse_json_response('Result: {"score": 9, "feedback": "great"}') == {"score": 9, "feedback": "great"}
    assert parse_json_response("Looks good overall.") is None
