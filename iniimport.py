# -*- coding: utf-8 -*-
import re

from initracker import make_change_id

# Matches a fenced code block tagged ini or diff, as pasted into a GitHub issue
reFencedBlock = re.compile(r'```(ini|diff)[^\n]*\n(.*?)```', re.DOTALL)

# Matches the opening fence of a code block tagged ini or diff
reFenceTag = re.compile(r'```(?:ini|diff)\b')

# Matches a section header in the format [name]
reSectionHeader = re.compile(r'^\[(.*)\]$')

# Matches a diff file header carrying a section, such as '--- [General]' or '+++ [General]'
reDiffSectionHeader = re.compile(r'^(?:---|\+\+\+)\s*\[(.*)\]\s*$')

# Diff markers that identify a patch outside of a code block
DIFF_MARKERS = ("@@", "---", "+++")

FORMAT_SNIPPET = "snippet"
FORMAT_DIFF = "diff"
FORMAT_GITHUB = "github"


def _normalize_newlines(text):
    return text.replace("\r\n", "\n").replace("\r", "\n")


def extract_code_block(text):
    """Return the body of the first ```ini or ```diff block, or None."""
    match = reFencedBlock.search(_normalize_newlines(text))
    if match:
        return match.group(2)
    return None


def classify_import(text):
    """
    Tell which dialect a pasted import is written in.

    Returns:
        str: 'github' for a fenced ```ini or ```diff block, 'diff' when any of
        '@@', '---' or '+++' is present, otherwise 'snippet'.
    """
    if reFenceTag.search(text):
        return FORMAT_GITHUB
    if any(marker in text for marker in DIFF_MARKERS):
        return FORMAT_DIFF
    return FORMAT_SNIPPET


def parse_ini_snippet(text):
    """
    Parse key=value lines under [section] headers into changes.

    Entries before any header belong to the root section ''. Comments and
    blank lines are skipped, any other line without '=' is reported.

    Returns:
        tuple[list, list]: ([{'section', 'key', 'value'}, ...], [error, ...])
    """
    changes = []
    errors = []
    current_section = ""

    for line in _normalize_newlines(text).split("\n"):
        line = line.strip()
        if not line or line.startswith(";") or line.startswith("#"):
            continue

        maSection = reSectionHeader.match(line)
        if maSection:
            current_section = maSection.group(1).strip()
            continue

        equal_index = line.find("=")
        if equal_index > 0:
            key = line[:equal_index].strip()
            value = line[equal_index + 1:].strip()
            changes.append({"section": current_section, "key": key, "value": value})
        else:
            errors.append(f"Invalid line format: {line}")

    return changes, errors


def parse_diff(text):
    """
    Parse the added lines of a diff into changes.

    Only '+key=value' lines become changes. The section comes from the last
    '--- [name]' / '+++ [name]' header or bare [name] context line seen.
    Removed lines, '@@' markers and other context are ignored.

    Returns:
        tuple[list, list]: ([{'section', 'key', 'value'}, ...], [error, ...])
    """
    changes = []
    errors = []
    current_section = None

    for line in _normalize_newlines(text).split("\n"):
        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith("---") or stripped.startswith("+++"):
            maHeader = reDiffSectionHeader.match(stripped)
            if maHeader:
                current_section = maHeader.group(1).strip()
            continue

        if not line.startswith("+"):
            maSection = reSectionHeader.match(stripped)
            if maSection and not line.startswith("-"):
                current_section = maSection.group(1).strip()
            continue

        content = line[1:].strip()
        equal_index = content.find("=")
        if equal_index <= 0:
            errors.append(f"Invalid added line: {stripped}")
            continue

        key = content[:equal_index].strip()
        value = content[equal_index + 1:].strip()
        if current_section is None:
            errors.append(f"No section found for key: {key}")
            continue
        changes.append({"section": current_section, "key": key, "value": value})

    return changes, errors


def _has_diff_lines(body):
    return any(line.startswith("+") or line.startswith("-") for line in body.split("\n"))


def parse_imported_data(text):
    """
    Parse a pasted snippet, diff or GitHub issue body.

    A fenced block is read as a diff when it is tagged ```diff, carries diff
    markers, or has lines starting with '+' or '-'. Otherwise it is a snippet.

    Returns:
        dict: {'changes': [...], 'format': 'snippet' | 'diff' | 'github', 'errors': [...]}
    """
    text = _normalize_newlines(text).strip()
    import_format = classify_import(text)

    if import_format == FORMAT_GITHUB:
        maBlock = reFencedBlock.search(text)
        if not maBlock:
            return {"changes": [], "format": import_format, "errors": ["Could not find code block in GitHub format"]}
        body = maBlock.group(2)
        if maBlock.group(1) == FORMAT_DIFF or classify_import(body) == FORMAT_DIFF or _has_diff_lines(body):
            changes, errors = parse_diff(body)
        else:
            changes, errors = parse_ini_snippet(body)
    elif import_format == FORMAT_DIFF:
        changes, errors = parse_diff(text)
    else:
        changes, errors = parse_ini_snippet(text)

    return {"changes": changes, "format": import_format, "errors": errors}


# Merge ------------------------------------------------------------------------
def merge_into_tracker(changes, tracker, translation_data):
    """
    Record parsed changes in a ChangeTracker.

    Args:
        changes (list): Parsed {'section', 'key', 'value'} dicts.
        tracker (ChangeTracker): The ledger of the current editing session.
        translation_data (dict): The working translation document. Only fields
            that exist in it can be imported.

    Returns:
        dict: {'imported': [{'section', 'key', 'value'}],
               'replaced': [{'section', 'key', 'oldValue', 'newValue'}],
               'skipped': [{'section', 'key', 'value', 'reason'}]}
    """
    imported = []
    replaced = []
    skipped = []

    for change in changes:
        section = change["section"]
        key = change["key"]
        value = change["value"]

        if section not in translation_data:
            skipped.append({"section": section, "key": key, "value": value, "reason": "Section not found"})
            continue
        if key not in translation_data[section]:
            skipped.append({"section": section, "key": key, "value": value, "reason": "Key not found"})
            continue

        existing = tracker.get_change(make_change_id(section, key))
        pending = existing is not None and not existing["submitted"]
        current_value = existing["newValue"] if pending else translation_data[section][key]
        if value == current_value:
            skipped.append({"section": section, "key": key, "value": value, "reason": "Value unchanged"})
            continue

        tracker.track_change(section, key, value)
        if pending:
            replaced.append({"section": section, "key": key, "oldValue": existing["newValue"], "newValue": value})
        else:
            imported.append({"section": section, "key": key, "value": value})

    return {"imported": imported, "replaced": replaced, "skipped": skipped}


def _plural(count, word):
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_import_report(result):
    """Summarize a merge result as plain text for the user."""
    imported = result["imported"]
    replaced = result["replaced"]
    skipped = result["skipped"]
    lines = []

    if imported:
        lines.append(f"Imported {_plural(len(imported), 'change')}.")
        sections = []
        for change in imported:
            if change["section"] not in sections:
                sections.append(change["section"])
        lines.append(f"   Sections affected: {', '.join(section or '(root)' for section in sections)}")

    if replaced:
        if lines:
            lines.append("")
        lines.append(f"Replaced {_plural(len(replaced), 'existing change')}:")
        for change in replaced[:5]:
            lines.append(f"   [{change['section']}] {change['key']}: \"{change['oldValue']}\" -> \"{change['newValue']}\"")
        if len(replaced) > 5:
            lines.append(f"   ... and {len(replaced) - 5} more")

    if skipped:
        if lines:
            lines.append("")
        lines.append(f"Skipped {_plural(len(skipped), 'item')}:")
        by_reason = {}
        for change in skipped:
            by_reason[change["reason"]] = by_reason.get(change["reason"], 0) + 1
        for reason, count in by_reason.items():
            lines.append(f"   {reason}: {count}")
        lines.append("   Examples:")
        for change in skipped[:3]:
            lines.append(f"   - [{change['section']}] {change['key']} ({change['reason']})")
        if len(skipped) > 3:
            lines.append(f"   ... and {len(skipped) - 3} more")

    if not lines:
        lines.append("No changes were imported.")

    return "\n".join(lines)
