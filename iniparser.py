# -*- coding: utf-8 -*-
from icu import Collator, Locale

# Name of the section holding LANGID and other document level entries
ROOT_SECTION = ""


def copy_ini_data(data):
    return {section: dict(entries) for section, entries in data.items()}


def parse_ini(content):
    """
    Parse translation file text into an ordered {section: {key: value}} dict.

    Entries before the first [section] header go to the root section ''.
    Comments (';' or '#'), blank lines and lines without a key=value pair are
    skipped, the parser never fails on malformed input.

    Example:
        ```
        LANGID=1031
        [General]
        Hello = Hallo
        ```
        parses to {'': {'LANGID': '1031'}, 'General': {'Hello': 'Hallo'}}
    """
    result = {}
    current_section = ROOT_SECTION

    for line in content.split("\n"):
        line = line.strip()
        if not line or line.startswith(";") or line.startswith("#"):
            continue

        if line.startswith("[") and line.endswith("]"):
            current_section = line[1:-1].strip()
            result.setdefault(current_section, {})
            continue

        equal_index = line.find("=")
        if equal_index > 0:
            key = line[:equal_index].strip()
            value = line[equal_index + 1:].strip()
            result.setdefault(current_section, {})[key] = value

    return result


def _collation_sorted(names):
    collator = Collator.createInstance(Locale.getRoot())
    return sorted(names, key=lambda name: (collator.getSortKey(name), name))


def serialize_ini(data, base_order=None):
    """
    Serialize a parsed document back to translation file text.

    Args:
        data (dict): The document to write.
        base_order (dict, optional): A reference document, normally the
            untranslated source file. When given, its section and key order is
            reproduced, keys missing from `data` are written with an empty value,
            and anything only `data` has is appended after the reference entries.

    Returns:
        str: '\\n' joined lines. Every section block ends with one blank line.

    Notes:
        Without `base_order` the root entries keep their own order, so LANGID
        stays at the top of the file, and sections and keys are sorted.
    """
    lines = []

    if base_order is None:
        root = data.get(ROOT_SECTION, {})
        for key, value in root.items():
            lines.append(f"{key}={value}")
        if root:
            lines.append("")

        sections = _collation_sorted(name for name in data if name != ROOT_SECTION)
        for section in sections:
            lines.append(f"[{section}]")
            for key in sorted(data[section]):
                lines.append(f"{key}={data[section][key]}")
            lines.append("")
        return "\n".join(lines)

    # Root entries in reference order, then root keys only the target has
    target_root = data.get(ROOT_SECTION, {})
    base_root = base_order.get(ROOT_SECTION, {})
    for key in base_root:
        lines.append(f"{key}={target_root.get(key, '')}")
    if base_root:
        lines.append("")

    extra_root_keys = [key for key in target_root if key not in base_root]
    for key in extra_root_keys:
        lines.append(f"{key}={target_root[key]}")
    if extra_root_keys:
        lines.append("")

    for section, base_entries in base_order.items():
        if section == ROOT_SECTION:
            continue
        target_entries = data.get(section, {})
        lines.append(f"[{section}]")
        for key in base_entries:
            lines.append(f"{key}={target_entries.get(key, '')}")

        extra_keys = [key for key in target_entries if key not in base_entries]
        if extra_keys:
            lines.append("")
            for key in extra_keys:
                lines.append(f"{key}={target_entries[key]}")
        lines.append("")

    for section, target_entries in data.items():
        if section == ROOT_SECTION or section in base_order:
            continue
        lines.append(f"[{section}]")
        for key, value in target_entries.items():
            lines.append(f"{key}={value}")
        lines.append("")

    return "\n".join(lines)


def count_format_specifiers(text):
    """Count %d, %s and literal backslash-n sequences in a translation string."""
    return {
        "percentD": text.count("%d"),
        "percentS": text.count("%s"),
        "newLines": text.count("\\n"),
    }


def compare_translation(base_data, translation_data):
    """
    Build the review model of a translation against its source file.

    Every key of every named section in `base_data` yields one entry with a
    status of 'missing' (empty translation), 'same' (identical to the source)
    or 'translated'. Translated entries are flagged 'isInvalid' when their
    %d, %s or \\n counts differ from the source text.

    Returns:
        dict: {'entries': [...], 'stats': {'total', 'untranslated', 'invalid'},
               'sectionStats': {section: {'total', 'untranslated', 'invalid'}}}
    """
    entries = []
    section_stats = {}
    untranslated_count = 0
    invalid_count = 0

    for section, base_entries in base_data.items():
        if section == ROOT_SECTION:
            continue
        stats = section_stats.setdefault(section, {"total": 0, "untranslated": 0, "invalid": 0})
        translated_entries = translation_data.get(section, {})

        for key, english_text in base_entries.items():
            translated_text = translated_entries.get(key, "")
            if not translated_text:
                status = "missing"
            elif translated_text == english_text:
                status = "same"
            else:
                status = "translated"

            is_invalid = False
            if status == "translated":
                is_invalid = count_format_specifiers(english_text) != count_format_specifiers(translated_text)

            stats["total"] += 1
            if status != "translated":
                stats["untranslated"] += 1
                untranslated_count += 1
            if is_invalid:
                stats["invalid"] += 1
                invalid_count += 1

            entries.append({
                "section": section,
                "key": key,
                "englishText": english_text,
                "translatedText": translated_text,
                "status": status,
                "isInvalid": is_invalid,
            })

    return {
        "entries": entries,
        "stats": {"total": len(entries), "untranslated": untranslated_count, "invalid": invalid_count},
        "sectionStats": section_stats,
    }
