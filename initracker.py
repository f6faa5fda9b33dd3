# -*- coding: utf-8 -*-
import json
import time
from urllib.parse import quote

from iniparser import copy_ini_data

PATCH_FORMATS = ("diff", "json", "snippet")

# Keys every persisted change record must carry
CHANGE_RECORD_KEYS = ("section", "key", "originalValue", "newValue", "timestamp")

# Older name of the snippet format
PATCH_FORMAT_ALIASES = {"ini-snippet": "snippet"}


def make_change_id(section, key):
    """
    Build the id of a tracked change.

    Both parts are percent-quoted so a '/' inside a section or key can't make
    two fields share an id.

    Example:
        make_change_id("General", "Hello") -> "General/Hello"
        make_change_id("", "LANGID") -> "/LANGID"
    """
    return f"{quote(section, safe='')}/{quote(key, safe='')}"


def _now_ms():
    return int(time.time() * 1000)


class ChangeTracker:
    """
    Per-field edit ledger for one translation file.

    The baseline document is copied once and never modified. Only edited
    fields are stored, as dicts shaped like the persisted session records:
    id, section, key, originalValue, newValue, timestamp, submitted and,
    after acceptance, submittedAt.
    """

    def __init__(self, original_data, selected_translation=""):
        self.original_data = copy_ini_data(original_data)
        self.selected_translation = selected_translation or ""
        self.changes = {}
        self._last_timestamp = 0

    def _next_timestamp(self):
        self._last_timestamp = max(_now_ms(), self._last_timestamp + 1)
        return self._last_timestamp

    def get_original_value(self, section, key):
        return self.original_data.get(section, {}).get(key, "")

    # Tracking -----------------------------------------------------------------
    def track_change(self, section, key, new_value):
        """Record an edit, or drop the entry when the value is back to the original."""
        change_id = make_change_id(section, key)
        original_value = self.get_original_value(section, key)

        if new_value == original_value:
            self.changes.pop(change_id, None)
            return

        existing = self.changes.get(change_id)
        if existing is not None and not existing["submitted"]:
            existing["newValue"] = new_value
            return

        self.changes[change_id] = {
            "id": change_id,
            "section": section,
            "key": key,
            "originalValue": original_value,
            "newValue": new_value,
            "timestamp": self._next_timestamp(),
            "submitted": False,
        }

    def get_change(self, change_id):
        return self.changes.get(change_id)

    def get_all_changes(self):
        return sorted(self.changes.values(), key=lambda change: change["timestamp"])

    def get_unsubmitted_changes(self):
        return [change for change in self.get_all_changes() if not change["submitted"]]

    def get_changes_by_section(self, section):
        return sorted(
            (change for change in self.changes.values() if change["section"] == section),
            key=lambda change: change["key"],
        )

    def get_current_value(self, section, key):
        change = self.changes.get(make_change_id(section, key))
        if change is not None:
            return change["newValue"]
        return self.get_original_value(section, key)

    def apply_changes(self):
        """Return a new document: the baseline with every tracked value laid over it."""
        data = copy_ini_data(self.original_data)
        for change in self.get_all_changes():
            data.setdefault(change["section"], {})[change["key"]] = change["newValue"]
        return data

    # Undo ---------------------------------------------------------------------
    def undo_change(self, change_id):
        change = self.changes.pop(change_id, None)
        if change is None:
            return None
        return change["originalValue"]

    def undo_section(self, section):
        """
        Drop every pending change of a section.

        Returns:
            dict: {key: originalValue} for the caller to write back into the
            working document.
        """
        section_changes = [change for change in self.get_unsubmitted_changes() if change["section"] == section]
        restored_values = {change["key"]: change["originalValue"] for change in section_changes}
        for change in section_changes:
            del self.changes[change["id"]]
        return restored_values

    def undo_all(self):
        """Drop every pending change and return {section: {key: originalValue}}."""
        pending = self.get_unsubmitted_changes()
        restored_values = {}
        for change in pending:
            restored_values.setdefault(change["section"], {})[change["key"]] = change["originalValue"]
        for change in pending:
            del self.changes[change["id"]]
        return restored_values

    # Accept -------------------------------------------------------------------
    def mark_as_submitted(self, change_ids):
        """
        Mark pending changes as submitted with one shared submittedAt.

        Returns:
            list: The changes that went from pending to submitted in this call.
        """
        submitted_at = _now_ms()
        transitioned = []
        for change_id in change_ids:
            change = self.changes.get(change_id)
            if change is None or change["submitted"]:
                continue
            change["submitted"] = True
            change["submittedAt"] = submitted_at
            transitioned.append(change)
        return transitioned

    def accept_change(self, change_id):
        return self.mark_as_submitted([change_id])

    def accept_section(self, section):
        return self.mark_as_submitted(
            [change["id"] for change in self.get_unsubmitted_changes() if change["section"] == section]
        )

    def accept_all(self):
        return self.mark_as_submitted([change["id"] for change in self.get_unsubmitted_changes()])

    def clear_submitted_changes(self):
        self.changes = {change_id: change for change_id, change in self.changes.items() if not change["submitted"]}

    def clear_all(self):
        self.changes = {}

    def reset(self, new_original_data):
        self.original_data = copy_ini_data(new_original_data)
        self.changes = {}

    def set_changes_from_list(self, records):
        """
        Replace the ledger contents with persisted change records.

        Records whose newValue equals their originalValue are dropped, they
        can't exist in a live ledger either.

        Raises:
            ValueError: A record lacks one of CHANGE_RECORD_KEYS. The ledger is
                left unchanged.
        """
        for record in records:
            missing = [key for key in CHANGE_RECORD_KEYS if key not in record]
            if missing:
                raise ValueError(f"Change record is missing: {', '.join(missing)}")

        self.changes = {}
        for record in records:
            if record["newValue"] == record["originalValue"]:
                continue
            change = dict(record)
            change["id"] = make_change_id(change["section"], change["key"])
            change["submitted"] = bool(change.get("submitted", False))
            self.changes[change["id"]] = change
            self._last_timestamp = max(self._last_timestamp, int(change["timestamp"]))

    # Patches ------------------------------------------------------------------
    def generate_patch(self, change_ids, patch_format="diff"):
        """
        Render selected changes as transmissible text.

        Args:
            change_ids (list): Ids to include. Unknown ids are ignored.
            patch_format (str): 'diff', 'json' or 'snippet'.

        Returns:
            str: The patch, or '' when no id matched.

        Example:
            With Hello changed from 'Hi' to 'Hallo' in [General]:

            diff:
            ```
            --- [General]
            +++ [General]
            @@ Hello @@
            -Hello=Hi
            +Hello=Hallo
            ```

            snippet:
            ```
            [General]
            Hello=Hallo
            ```
        """
        patch_format = PATCH_FORMAT_ALIASES.get(patch_format, patch_format)
        if patch_format not in PATCH_FORMATS:
            raise ValueError(f"Unknown patch format '{patch_format}'. Use one of: {', '.join(PATCH_FORMATS)}.")

        selected_changes = [self.changes[change_id] for change_id in change_ids if change_id in self.changes]
        if not selected_changes:
            return ""

        if patch_format == "json":
            return json.dumps(selected_changes, indent=2, ensure_ascii=False)
        if patch_format == "diff":
            return self._generate_unified_diff(selected_changes)
        return self._generate_ini_snippet(selected_changes)

    @staticmethod
    def _group_changes_by_section(changes):
        grouped = {}
        for change in changes:
            grouped.setdefault(change["section"], []).append(change)
        return grouped

    def _generate_unified_diff(self, changes):
        lines = []
        for section, section_changes in self._group_changes_by_section(changes).items():
            lines.append(f"--- [{section}]")
            lines.append(f"+++ [{section}]")
            for change in section_changes:
                lines.append(f"@@ {change['key']} @@")
                if change["originalValue"]:
                    lines.append(f"-{change['key']}={change['originalValue']}")
                lines.append(f"+{change['key']}={change['newValue']}")
            lines.append("")
        return "\n".join(lines)

    def _generate_ini_snippet(self, changes):
        lines = []
        for section, section_changes in self._group_changes_by_section(changes).items():
            lines.append(f"[{section}]")
            for change in section_changes:
                lines.append(f"{change['key']}={change['newValue']}")
            lines.append("")
        return "\n".join(lines)

    def get_stats(self):
        changes = list(self.changes.values())
        submitted = sum(1 for change in changes if change["submitted"])
        return {
            "total": len(changes),
            "submitted": submitted,
            "pending": len(changes) - submitted,
            "sections": len({change["section"] for change in changes}),
        }
