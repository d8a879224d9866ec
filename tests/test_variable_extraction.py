"""Tests for variable extraction parsing and filtering."""

import json

import pytest

from prompt_evo.core.diagnostics import DiagnosticLog
from prompt_evo.core.errors import ParseError
from prompt_evo.core.variable_extraction import (
    filter_extracted_variables,
    normalize_extraction,
    parse_extraction_result,
)


def variable(name, value="spring", text=None, occurrence=1, **extra):
    item = {
        "name": name,
        "value": value,
        "position": {"originalText": text or value, "occurrence": occurrence},
        "reason": "seasonal detail",
    }
    item.update(extra)
    return item


def reply(*variables, summary="Found variables"):
    return "```json\n" + json.dumps({"variables": list(variables), "summary": summary}) + "\n```"


def test_parses_variables():
    result = parse_extraction_result(reply(variable("season", category="time")))
    assert len(result.variables) == 1
    extracted = result.variables[0]
    assert extracted.name == "season"
    assert extracted.position.original_text == "spring"
    assert extracted.position.occurrence == 1
    assert extracted.category == "time"
    assert result.summary == "Found variables"


def test_existing_names_are_dropped_case_insensitively():
    result = parse_extraction_result(
        reply(variable("Season"), variable("city", value="Paris")),
        existing_variable_names=["season"],
    )
    assert [v.name for v in result.variables] == ["city"]
    assert [d.code for d in result.diagnostics] == ["existing_variable_dropped"]


def test_duplicates_keep_first():
    log = DiagnosticLog()
    response = normalize_extraction({
        "variables": [variable("city", value="Paris"), variable(" CITY ", value="Rome")],
        "summary": "",
    })
    kept = filter_extracted_variables(response.variables, [], log)
    assert [v.value for v in kept] == ["Paris"]
    assert log.codes() == ["duplicate_variable_dropped"]


def test_empty_variable_list_is_valid():
    result = parse_extraction_result(reply())
    assert result.variables == []


def test_missing_variables_field_is_reported():
    with pytest.raises(ParseError, match='"variables" array'):
        parse_extraction_result('{"summary": "none"}')


def test_missing_summary_is_reported():
    with pytest.raises(ParseError, match='"summary" string'):
        parse_extraction_result('{"variables": []}')


@pytest.mark.parametrize("item,field", [
    ({"value": "x", "position": {"originalText": "x", "occurrence": 1}, "reason": "r"}, '"name"'),
    ({"name": "a", "value": 3, "position": {"originalText": "x", "occurrence": 1}, "reason": "r"}, '"value"'),
    ({"name": "a", "value": "x", "reason": "r"}, '"position"'),
    ({"name": "a", "value": "x", "position": {"occurrence": 1}, "reason": "r"}, '"originalText"'),
    ({"name": "a", "value": "x", "position": {"originalText": "x", "occurrence": 0}, "reason": "r"}, '"occurrence"'),
    ({"name": "a", "value": "x", "position": {"originalText": "x", "occurrence": 1}}, '"reason"'),
])
def test_invalid_items(item, field):
    with pytest.raises(ParseError, match=field):
        normalize_extraction({"variables": [item], "summary": ""})


def test_prose_reply_is_a_parse_error():
    with pytest.raises(ParseError) as exc_info:
        parse_extraction_result("There are no variables worth extracting.")
    assert exc_info.value.code == "error.variable_extraction.parse"
