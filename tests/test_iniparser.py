"""
Tests for parsing and serializing translation documents.
"""

from iniparser import compare_translation, copy_ini_data, count_format_specifiers, parse_ini, serialize_ini


def test_parse_sections_root_entries_comments_and_whitespace():
    ini = "\n".join([
        "; comment line",
        "# another comment",
        "  LANGID = 1033  ",
        "VERSION= 1.2 ",
        "",
        "[ General ]",
        " Hello = World ",
        "Bye=Now",
        "",
        "[UI]",
        "Ok=OK",
        "Cancel=Cancel",
        "",
        "not-a-pair-without-equals",
        "=no key",
    ])

    assert parse_ini(ini) == {
        "": {"LANGID": "1033", "VERSION": "1.2"},
        "General": {"Hello": "World", "Bye": "Now"},
        "UI": {"Ok": "OK", "Cancel": "Cancel"},
    }


def test_parse_splits_on_first_equals_and_handles_crlf():
    parsed = parse_ini("LANGID=1033\r\n[General]\r\nFormula=a=b+c\r\n")
    assert parsed["General"]["Formula"] == "a=b+c"
    assert parsed[""]["LANGID"] == "1033"


def test_parse_keeps_first_seen_section_order_when_reopened():
    parsed = parse_ini("[B]\nx=1\n[A]\ny=2\n[B]\nz=3\n")
    assert list(parsed) == ["B", "A"]
    assert parsed["B"] == {"x": "1", "z": "3"}


def test_parse_empty_section_is_kept():
    assert parse_ini("[Empty]\n") == {"Empty": {}}


def test_serialize_without_reference_is_canonical():
    data = {
        "": {"ZED": "1", "A": "2"},
        "B": {"bKey2": "y", "aKey1": "x"},
        "A": {"zKey": "3", "aKey": "4"},
    }

    expected = "\n".join([
        "ZED=1",
        "A=2",
        "",
        "[A]",
        "aKey=4",
        "zKey=3",
        "",
        "[B]",
        "aKey1=x",
        "bKey2=y",
        "",
    ])
    assert serialize_ini(data) == expected


def test_serialize_without_reference_sorts_sections_alphabetically_ignoring_case():
    data = {"b": {}, "C": {}, "A": {}}
    output = serialize_ini(data)
    assert output == "[A]\n\n[b]\n\n[C]\n"


def test_round_trip_without_reference():
    data = {
        "": {"LANGID": "1033", "VERSION": "1.0"},
        "B": {"b": "2", "a": "1"},
        "A": {"z": "9", "a": "0"},
    }
    reparsed = parse_ini(serialize_ini(data))

    assert reparsed == data
    assert list(reparsed) == ["", "A", "B"]
    assert list(reparsed["A"]) == ["a", "z"]


def test_serialize_with_reference_fills_blanks_and_appends_extras():
    base = {
        "": {"LANGID": "1033", "VERSION": "1.0"},
        "General": {"Hello": "", "Bye": ""},
        "UI": {"Ok": "", "Cancel": ""},
    }
    translation = {
        "": {"LANGID": "1033", "VERSION": "2.0", "EXTRA": "X"},
        "General": {"Bye": "Ciao", "Hello": "Hallo"},
        "UI": {"Cancel": "Abbrechen"},
    }

    expected = "\n".join([
        "LANGID=1033",
        "VERSION=2.0",
        "",
        "EXTRA=X",
        "",
        "[General]",
        "Hello=Hallo",
        "Bye=Ciao",
        "",
        "[UI]",
        "Ok=",
        "Cancel=Abbrechen",
        "",
    ])
    assert serialize_ini(translation, base) == expected


def test_serialize_appends_sections_missing_from_reference():
    base = {"": {"LANGID": "1033"}, "BaseOnly": {"A": ""}}
    data = {
        "": {"LANGID": "1033"},
        "Extra": {"K2": "v2", "K1": "v1"},
        "BaseOnly": {"A": "x"},
    }

    expected = "\n".join([
        "LANGID=1033",
        "",
        "[BaseOnly]",
        "A=x",
        "",
        "[Extra]",
        "K2=v2",
        "K1=v1",
        "",
    ])
    assert serialize_ini(data, base) == expected


def test_serialize_appends_extra_keys_of_partially_covered_section():
    base = {"": {"LANGID": "1033"}, "S": {"A": "", "C": ""}}
    data = {"": {"LANGID": "1033"}, "S": {"Z": "z", "A": "a", "B": "b"}}

    expected = "\n".join([
        "LANGID=1033",
        "",
        "[S]",
        "A=a",
        "C=",
        "",
        "Z=z",
        "B=b",
        "",
    ])
    output = serialize_ini(data, base)
    assert output == expected
    assert parse_ini(output)["S"] == {"A": "a", "C": "", "Z": "z", "B": "b"}


def test_serialize_with_reference_writes_sections_the_target_lacks():
    base = {"": {"LANGID": "1033"}, "Menu": {"Open": "", "Close": ""}}
    data = {"": {"LANGID": "1049"}}

    assert serialize_ini(data, base) == "LANGID=1049\n\n[Menu]\nOpen=\nClose=\n"


def test_copy_ini_data_is_independent():
    data = {"S": {"k": "v"}}
    copied = copy_ini_data(data)
    copied["S"]["k"] = "changed"
    assert data["S"]["k"] == "v"


def test_count_format_specifiers():
    text = "Hello %s, you have %d items.\\nNext %s %d.\\n"
    assert count_format_specifiers(text) == {"percentD": 2, "percentS": 2, "newLines": 2}


def test_count_format_specifiers_ignores_real_newlines_and_plain_text():
    counts = count_format_specifiers("100 percent\nsd and ds")
    assert counts == {"percentD": 0, "percentS": 0, "newLines": 0}


def test_compare_translation():
    base = {
        "": {"LANGID": "1033"},
        "General": {"A": "Hi %s", "B": "Bye", "C": "Ok"},
        "UI": {"Title": "Title\\n"},
    }
    translation = {
        "": {"LANGID": "1031"},
        "General": {"A": "Hallo", "B": "Bye"},
        "UI": {"Title": "Titel\\n"},
    }

    review = compare_translation(base, translation)
    statuses = {(entry["section"], entry["key"]): (entry["status"], entry["isInvalid"]) for entry in review["entries"]}

    assert statuses == {
        ("General", "A"): ("translated", True),
        ("General", "B"): ("same", False),
        ("General", "C"): ("missing", False),
        ("UI", "Title"): ("translated", False),
    }
    assert review["stats"] == {"total": 4, "untranslated": 2, "invalid": 1}
    assert review["sectionStats"]["General"] == {"total": 3, "untranslated": 2, "invalid": 1}
    assert review["sectionStats"]["UI"] == {"total": 1, "untranslated": 0, "invalid": 0}
