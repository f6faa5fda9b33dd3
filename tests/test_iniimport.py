"""
Tests for recognizing, parsing and merging imported changes.
"""

import pytest

from iniimport import (
    classify_import,
    extract_code_block,
    format_import_report,
    merge_into_tracker,
    parse_diff,
    parse_imported_data,
    parse_ini_snippet,
)
from initracker import ChangeTracker

TRANSLATION = {
    "": {"LANGID": "1031"},
    "General": {"Hello": "Hallo", "Bye": "", "Yes": "Ja"},
    "UI": {"Ok": "OK"},
}


@pytest.fixture
def tracker():
    return ChangeTracker(TRANSLATION, "german.ini")


def test_classify_import():
    assert classify_import("```ini\n[General]\nHello=Hi\n```") == "github"
    assert classify_import("Please merge:\n```diff\n+++ [General]\n+Hello=Hi\n```") == "github"
    assert classify_import("--- [General]\n+++ [General]\n+Hello=Hi") == "diff"
    assert classify_import("@@ Hello @@\n+Hello=Hi") == "diff"
    assert classify_import("[General]\nHello=Hi") == "snippet"
    assert classify_import("```python\nprint(1)\n```") == "snippet"


def test_extract_code_block():
    body = extract_code_block("Text before\r\n```ini\r\n[UI]\r\nOk=Gut\r\n```\r\nafter")
    assert body == "[UI]\nOk=Gut\n"
    assert extract_code_block("no block here") is None


def test_parse_ini_snippet():
    changes, errors = parse_ini_snippet("\n".join([
        "; comment",
        "LANGID=1031",
        "[General]",
        " Hello = Servus ",
        "this line is not a pair",
        "[UI]",
        "Ok=",
    ]))

    assert changes == [
        {"section": "", "key": "LANGID", "value": "1031"},
        {"section": "General", "key": "Hello", "value": "Servus"},
        {"section": "UI", "key": "Ok", "value": ""},
    ]
    assert errors == ["Invalid line format: this line is not a pair"]


def test_parse_diff_reads_sections_from_headers():
    changes, errors = parse_diff("\n".join([
        "--- [General]",
        "+++ [General]",
        "@@ Hello @@",
        "-Hello=Hallo",
        "+Hello=Servus",
        "",
        "--- [UI]",
        "+++ [UI]",
        "@@ Ok @@",
        "+Ok=Gut",
    ]))

    assert errors == []
    assert changes == [
        {"section": "General", "key": "Hello", "value": "Servus"},
        {"section": "UI", "key": "Ok", "value": "Gut"},
    ]


def test_parse_diff_with_context_section_lines():
    changes, errors = parse_diff("--- a/german.ini\n+++ b/german.ini\n@@ -1,3 +1,3 @@\n [General]\n-Hello=Hallo\n+Hello=Servus\n")
    assert errors == []
    assert changes == [{"section": "General", "key": "Hello", "value": "Servus"}]


def test_parse_diff_addition_before_section_is_an_error():
    changes, errors = parse_diff("@@ Hello @@\n+Hello=Servus\n[UI]\n+Ok=Gut\n+broken line\n")

    assert changes == [{"section": "UI", "key": "Ok", "value": "Gut"}]
    assert errors == ["No section found for key: Hello", "Invalid added line: +broken line"]


def test_parse_diff_keeps_brackets_in_values():
    changes, _ = parse_diff("+++ [UI]\n+Hint=Press [Enter]\n")
    assert changes == [{"section": "UI", "key": "Hint", "value": "Press [Enter]"}]


def test_parse_imported_data_dispatches_on_format():
    snippet = parse_imported_data("[UI]\nOk=Gut\n")
    assert snippet["format"] == "snippet"
    assert snippet["changes"] == [{"section": "UI", "key": "Ok", "value": "Gut"}]

    wrapped = parse_imported_data("Changes:\n```diff\n--- [UI]\n+++ [UI]\n+Ok=Gut\n```\nThanks")
    assert wrapped["format"] == "github"
    assert wrapped["changes"] == [{"section": "UI", "key": "Ok", "value": "Gut"}]

    wrapped_snippet = parse_imported_data("```ini\n[UI]\nOk=Gut\n```")
    assert wrapped_snippet["changes"] == [{"section": "UI", "key": "Ok", "value": "Gut"}]


def test_parse_imported_data_unclosed_block():
    result = parse_imported_data("```ini\n[UI]\nOk=Gut\n")
    assert result["format"] == "github"
    assert result["changes"] == []
    assert result["errors"] == ["Could not find code block in GitHub format"]


def test_snippet_output_re_imports(tracker):
    tracker.track_change("General", "Hello", "Servus")
    tracker.track_change("UI", "Ok", "Gut")
    tracker.track_change("", "LANGID", "3079")
    selected = tracker.get_unsubmitted_changes()

    patch = tracker.generate_patch([c["id"] for c in selected], "snippet")
    changes, errors = parse_ini_snippet(patch)

    assert errors == []
    assert changes == [{"section": c["section"], "key": c["key"], "value": c["newValue"]} for c in selected]


def test_diff_output_re_imports(tracker):
    tracker.track_change("General", "Bye", "Tschüss")
    tracker.track_change("UI", "Ok", "Gut")
    selected = tracker.get_unsubmitted_changes()

    result = parse_imported_data(tracker.generate_patch([c["id"] for c in selected], "diff"))

    assert result["format"] == "diff"
    assert result["errors"] == []
    assert result["changes"] == [{"section": c["section"], "key": c["key"], "value": c["newValue"]} for c in selected]


def test_merge_into_tracker(tracker):
    tracker.track_change("General", "Yes", "Jawohl")

    result = merge_into_tracker([
        {"section": "General", "key": "Hello", "value": "Servus"},
        {"section": "General", "key": "Yes", "value": "Genau"},
        {"section": "General", "key": "Missing", "value": "x"},
        {"section": "Nowhere", "key": "Hello", "value": "x"},
        {"section": "UI", "key": "Ok", "value": "OK"},
    ], tracker, TRANSLATION)

    assert result["imported"] == [{"section": "General", "key": "Hello", "value": "Servus"}]
    assert result["replaced"] == [{"section": "General", "key": "Yes", "oldValue": "Jawohl", "newValue": "Genau"}]
    assert [(s["key"], s["reason"]) for s in result["skipped"]] == [
        ("Missing", "Key not found"),
        ("Hello", "Section not found"),
        ("Ok", "Value unchanged"),
    ]

    assert tracker.get_current_value("General", "Hello") == "Servus"
    assert tracker.get_current_value("General", "Yes") == "Genau"
    assert tracker.get_change("General/Missing") is None
    assert tracker.get_stats()["pending"] == 2


def test_merge_duplicate_entries_replace_each_other(tracker):
    result = merge_into_tracker([
        {"section": "UI", "key": "Ok", "value": "Gut"},
        {"section": "UI", "key": "Ok", "value": "Prima"},
    ], tracker, TRANSLATION)

    assert len(result["imported"]) == 1
    assert result["replaced"] == [{"section": "UI", "key": "Ok", "oldValue": "Gut", "newValue": "Prima"}]


def test_merge_back_to_original_clears_pending_change(tracker):
    tracker.track_change("UI", "Ok", "Gut")
    result = merge_into_tracker([{"section": "UI", "key": "Ok", "value": "OK"}], tracker, TRANSLATION)

    assert len(result["replaced"]) == 1
    assert tracker.get_change("UI/Ok") is None


def test_format_import_report():
    report = format_import_report({
        "imported": [{"section": "General", "key": "Hello", "value": "Servus"}],
        "replaced": [{"section": "UI", "key": "Ok", "oldValue": "Gut", "newValue": "Prima"}],
        "skipped": [
            {"section": "General", "key": "Missing", "value": "x", "reason": "Key not found"},
            {"section": "General", "key": "Gone", "value": "x", "reason": "Key not found"},
        ],
    })

    assert "Imported 1 change." in report
    assert "Sections affected: General" in report
    assert "Replaced 1 existing change:" in report
    assert '[UI] Ok: "Gut" -> "Prima"' in report
    assert "Skipped 2 items:" in report
    assert "Key not found: 2" in report
    assert "- [General] Missing (Key not found)" in report


def test_format_import_report_when_nothing_happened():
    assert format_import_report({"imported": [], "replaced": [], "skipped": []}) == "No changes were imported."


def test_fenced_diff_without_headers():
    result = parse_imported_data("Suggested fix:\n```diff\n[General]\n-Hello=Hi\n+Hello=Hallo\n```\n")

    assert result["format"] == "github"
    assert result["errors"] == []
    assert result["changes"] == [{"section": "General", "key": "Hello", "value": "Hallo"}]


def test_fenced_ini_block_with_added_lines_is_read_as_diff():
    result = parse_imported_data("```ini\n [UI]\n-Ok=OK\n+Ok=Gut\n```")
    assert result["changes"] == [{"section": "UI", "key": "Ok", "value": "Gut"}]
