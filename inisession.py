# -*- coding: utf-8 -*-
import json
import time

from iniparser import copy_ini_data
from initracker import ChangeTracker

DEFAULT_TRANSLATION_FILENAME = "translation.ini"
DEFAULT_ENGLISH_FILENAME = "english.ini"

SESSION_KEYS = (
    "selectedTranslation",
    "localFileName",
    "localEnglishFileName",
    "englishData",
    "originalTranslationData",
    "translationData",
    "changes",
    "lastEditedAt",
)


def build_session_snapshot(selected_translation, english_data, original_translation_data, translation_data, changes,
                           local_file_name=None, local_english_file_name=None):
    """
    Build the record an external store persists for an editing session.

    Missing filenames fall back to the selected translation (or
    'translation.ini') and 'english.ini'. Documents and change records are
    copied so later edits don't leak into the snapshot.
    """
    if not local_file_name:
        local_file_name = selected_translation or DEFAULT_TRANSLATION_FILENAME
    if not local_english_file_name:
        local_english_file_name = DEFAULT_ENGLISH_FILENAME

    return {
        "selectedTranslation": selected_translation,
        "localFileName": local_file_name,
        "localEnglishFileName": local_english_file_name,
        "englishData": copy_ini_data(english_data),
        "originalTranslationData": copy_ini_data(original_translation_data),
        "translationData": copy_ini_data(translation_data),
        "changes": [dict(change) for change in changes],
        "lastEditedAt": int(time.time() * 1000),
    }


def session_to_json(snapshot):
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


def session_from_json(text):
    """
    Load a snapshot written by session_to_json.

    Raises:
        ValueError: The text is not JSON or a session key is missing.
    """
    try:
        snapshot = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Session data is not valid JSON: {e}") from e

    if not isinstance(snapshot, dict):
        raise ValueError("Session data must be a JSON object.")
    missing = [key for key in SESSION_KEYS if key not in snapshot]
    if missing:
        raise ValueError(f"Session data is missing: {', '.join(missing)}")
    return snapshot


def restore_tracker(snapshot):
    """Rebuild the ChangeTracker of a saved session."""
    tracker = ChangeTracker(snapshot["originalTranslationData"], snapshot["selectedTranslation"])
    tracker.set_changes_from_list(snapshot["changes"])
    return tracker
