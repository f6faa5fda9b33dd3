# -*- coding: utf-8 -*-
import argparse
import sys
import os
import inspect
import chardet

from inicodepage import CodepageError, LocaleMarkerError, decode_lang_bytes, encode_lang_text, get_lcid_info
from inisettings import CONFIG_FILENAME, load_config, write_config
from iniimport import format_import_report, merge_into_tracker, parse_imported_data
from iniparser import compare_translation, parse_ini
from inisession import build_session_snapshot, session_to_json
from inisource import LocalTranslationSource, get_document_encoding, read_ini_file, write_ini_file
from initracker import ChangeTracker, PATCH_FORMAT_ALIASES

"""
Translation files are written in the ANSI codepage of their LANGID. Printing
Cyrillic or CJK values to an older Windows console may show question marks,
the files themselves are not affected.
"""
# List to hold information about callable functions
callable_functions = []

PATCH_EXTENSIONS = {"diff": ".diff", "json": ".json", "snippet": ".ini"}


def mainFunction(func):
    """Decorator to mark functions as callable and add them to the list."""
    callable_functions.append(func)
    return func


def print_help():
    print("Available callable functions:")
    for func in callable_functions:
        print("- {}: {}".format(func.__name__, func.__doc__))


def print_docstrings():
    print("Docstrings for callable functions:")
    for func in callable_functions:
        print("\nFunction: {}".format(func.__name__))
        docstring = inspect.getdoc(func)
        if docstring:
            encoding = sys.stdout.encoding or "utf-8"
            encoded_docstring = docstring.encode(encoding, errors='replace').decode(encoding)
            print(encoded_docstring)
        else:
            print("No docstring available.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tools for editing LANGID encoded INI translation files.")
    parser.add_argument("--help-functions", action="store_true", help="Print available functions and their docstrings.")
    parser.add_argument("--list-functions", action="store_true", help="List available functions without docstrings.")
    parser.add_argument("--usage", action="store_true", help="Display usage information.")
    parser.add_argument("function", nargs="?", help="The name of the function to execute.")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the function.")

    args = parser.parse_args(argv)

    if args.usage:
        print("Usage: inilang.py function [args [args ...]]")
        print("       inilang.py --help-functions, or help")
        print("       inilang.py --list-functions, or list")
    elif args.help_functions or args.function == "help":
        print_docstrings()
    elif args.list_functions or args.function == "list":
        print("Available functions:")
        for func in callable_functions:
            print(func.__name__)
    elif args.function:
        function_name = args.function
        for func in callable_functions:
            if func.__name__ == function_name:
                func(*args.args)
                break
        else:
            print("Unknown function: {}".format(function_name))
    else:
        print("No command provided.")
        print_help()


def generate_output_filename(input_filename, name_text, file_extension=None, output_folder=None):
    """
    Build an output filename next to the input, e.g. ('german.ini', 'imported') -> 'german_imported.ini'.

    Args:
        input_filename (str): The file the output is derived from.
        name_text (str): Suffix describing the operation.
        file_extension (str, optional): Extension to use instead of the input's.
        output_folder (str, optional): Folder to place the file in, created if needed.
    """
    basename = os.path.basename(input_filename)
    stem, extension = os.path.splitext(basename)
    if file_extension:
        extension = file_extension if file_extension.startswith('.') else f".{file_extension}"
    suffix = name_text.strip().lower().replace(' ', '_').strip('_')
    file_name = f"{stem}_{suffix}{extension}"

    if output_folder:
        os.makedirs(output_folder, exist_ok=True)
        return os.path.join(output_folder, file_name)
    return os.path.join(os.path.dirname(input_filename), file_name)


def print_encoding_hint(raw_bytes):
    detected = chardet.detect(raw_bytes)
    if detected.get("encoding"):
        print(f"chardet suggests {detected['encoding']} ({detected['confidence']:.0%} confidence). "
              f"Add a LANGID=<id> line at the top of the file to choose the encoding.")


# Encoding --------------------------------------------------------------------
@mainFunction
def show_langid_encoding(langid):
    """
    Show the locale and codepage used for a LANGID.

    Args:
        langid (str): Windows locale id, e.g. 1049.

    Example:
        `show_langid_encoding 1049` prints:
        ```
        LANGID 1049: ru_RU, Russian (Russia)
        Encoding: cp1251
        ```
    """
    info = get_lcid_info(langid)
    if info is None:
        print(f"Unknown LANGID {langid}. No encoding is mapped to it.")
        return

    print(f"LANGID {info['lcid']}: {info['locale']}, {info['displayName']}")
    print(f"Encoding: {info['encoding']}")


@mainFunction
def convert_to_utf8(input_filename):
    """
    Decode a translation file with the codepage of its LANGID and write a UTF-8 copy.

    Args:
        input_filename (str): The translation file, e.g. 'russian.ini'.

    Output:
        <name>_utf8.ini next to the input, with the original line endings.
    """
    config = load_config()
    with open(input_filename, 'rb') as textIns:
        raw_bytes = textIns.read()

    try:
        text = decode_lang_bytes(raw_bytes, config["langid_window"])
    except LocaleMarkerError as e:
        print(f"Error: {e} Aborting.")
        print_encoding_hint(raw_bytes)
        return
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    output_filename = generate_output_filename(input_filename, "utf8", output_folder=config["output_folder"])
    with open(output_filename, 'w', encoding="utf8", newline='') as out:
        out.write(text)

    print(f"Output written to: {output_filename}")


@mainFunction
def convert_from_utf8(input_filename):
    """
    Encode a UTF-8 translation file back to the codepage of its LANGID.

    The text is written unchanged apart from the encoding, no entries are
    reordered. Characters the codepage can't hold abort the conversion.

    Args:
        input_filename (str): A UTF-8 file produced by convert_to_utf8 or an editor.

    Output:
        <name>_ansi.ini next to the input.
    """
    config = load_config()
    with open(input_filename, 'r', encoding="utf-8-sig", newline='') as textIns:
        text = textIns.read()

    try:
        encoding = get_document_encoding(parse_ini(text))
        encoded = encode_lang_text(text, encoding)
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    output_filename = generate_output_filename(input_filename, "ansi", output_folder=config["output_folder"])
    with open(output_filename, 'wb') as out:
        out.write(encoded)

    print(f"Output written to: {output_filename} ({encoding})")


# Translation files -----------------------------------------------------------
@mainFunction
def list_translations(folder="."):
    """
    List the translation files in a folder, leaving out the base file.

    Args:
        folder (str): Folder holding english.ini and its translations.
    """
    config = load_config()
    source = LocalTranslationSource(folder, config["base_filename"], config["translation_extension"], config["langid_window"])
    names = source.list_translations()
    if not names:
        print(f"No translation files found in {folder}.")
        return

    for name in names:
        print(name)
    print(f"[list_translations]: {len(names)} translation files")


@mainFunction
def rebuild_translation_file(translation_filename, base_filename):
    """
    Rewrite a translation so it follows the section and key order of the base file.

    Keys the translation lacks are written with an empty value so every entry
    of the base file has a slot. Entries only the translation has are kept
    after the base entries of their section.

    Args:
        translation_filename (str): e.g. 'german.ini'.
        base_filename (str): The source file, e.g. 'english.ini'.

    Output:
        <name>_rebuilt.ini encoded with the translation's LANGID codepage.
    """
    config = load_config()
    try:
        translation_data = read_ini_file(translation_filename, config["langid_window"])
        base_data = read_ini_file(base_filename, config["langid_window"])
        output_filename = generate_output_filename(translation_filename, "rebuilt", output_folder=config["output_folder"])
        write_ini_file(output_filename, translation_data, base_data)
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    print(f"Output written to: {output_filename}")


@mainFunction
def check_translation(base_filename, translation_filename):
    """
    Report untranslated entries and entries whose %d, %s or \\n counts differ from the base file.

    Args:
        base_filename (str): The source file, e.g. 'english.ini'.
        translation_filename (str): e.g. 'german.ini'.
    """
    config = load_config()
    try:
        base_data = read_ini_file(base_filename, config["langid_window"])
        translation_data = read_ini_file(translation_filename, config["langid_window"])
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    review = compare_translation(base_data, translation_data)
    for entry in review["entries"]:
        if entry["isInvalid"]:
            print(f"[{entry['section']}] {entry['key']}: format specifiers differ")
            print(f"    base:        {entry['englishText']}")
            print(f"    translation: {entry['translatedText']}")

    for section, stats in review["sectionStats"].items():
        if stats["untranslated"] or stats["invalid"]:
            print(f"[{section}]: {stats['untranslated']} of {stats['total']} untranslated, {stats['invalid']} invalid")

    stats = review["stats"]
    print(f"[check_translation]: Total: {stats['total']}")
    print(f"[check_translation]: Untranslated: {stats['untranslated']}")
    print(f"[check_translation]: Invalid: {stats['invalid']}")


# Patches ---------------------------------------------------------------------
@mainFunction
def create_patch(original_filename, edited_filename, patch_format=None):
    """
    Write the edits between two versions of a translation as a patch.

    Args:
        original_filename (str): The translation before editing.
        edited_filename (str): The edited translation.
        patch_format (str, optional): 'diff', 'json' or 'snippet'. Defaults to the
            patch_format setting.

    Output:
        <edited name>_patch.diff, .json or .ini next to the edited file.
    """
    config = load_config()
    patch_format = patch_format or config["patch_format"]
    patch_format = PATCH_FORMAT_ALIASES.get(patch_format, patch_format)
    if patch_format not in PATCH_EXTENSIONS:
        print(f"Error: Unknown patch format '{patch_format}'. Use one of: {', '.join(PATCH_EXTENSIONS)}. Aborting.")
        return

    try:
        original_data = read_ini_file(original_filename, config["langid_window"])
        edited_data = read_ini_file(edited_filename, config["langid_window"])
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    tracker = ChangeTracker(original_data, os.path.basename(original_filename))
    for section, entries in edited_data.items():
        for key, value in entries.items():
            tracker.track_change(section, key, value)

    pending = tracker.get_unsubmitted_changes()
    if not pending:
        print("No changes found. Nothing to write.")
        return

    patch = tracker.generate_patch([change["id"] for change in pending], patch_format)
    output_filename = generate_output_filename(edited_filename, "patch", PATCH_EXTENSIONS[patch_format],
                                               config["output_folder"])
    with open(output_filename, 'w', encoding="utf8", newline='\n') as out:
        out.write(patch)

    stats = tracker.get_stats()
    print(f"[create_patch]: {stats['pending']} changes in {stats['sections']} sections")
    print(f"Output written to: {output_filename}")


@mainFunction
def import_patch(translation_filename, patch_filename, base_filename=None):
    """
    Apply a snippet, diff or GitHub issue body to a translation file.

    Entries for sections or keys the translation doesn't have are skipped and
    listed in the report. Lines that can't be parsed are reported and the rest
    of the patch is still applied.

    Args:
        translation_filename (str): e.g. 'german.ini'.
        patch_filename (str): UTF-8 text with the changes to import.
        base_filename (str, optional): Source file whose layout the output follows.

    Output:
        <name>_imported.ini encoded with the translation's LANGID codepage, and
        <name>_session.json holding the documents and tracked changes.
    """
    config = load_config()
    try:
        translation_data = read_ini_file(translation_filename, config["langid_window"])
        base_data = read_ini_file(base_filename, config["langid_window"]) if base_filename else None
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    with open(patch_filename, 'r', encoding="utf-8-sig") as patchIns:
        parse_result = parse_imported_data(patchIns.read())

    print(f"[import_patch]: Detected {parse_result['format']} format")
    if parse_result["errors"]:
        print("Parse errors:")
        for error in parse_result["errors"]:
            print(f"   {error}")

    if not parse_result["changes"]:
        print("No valid changes found in the imported data.")
        return

    tracker = ChangeTracker(translation_data, os.path.basename(translation_filename))
    result = merge_into_tracker(parse_result["changes"], tracker, translation_data)
    print(format_import_report(result))

    if not tracker.get_unsubmitted_changes():
        return

    updated_data = tracker.apply_changes()
    output_filename = generate_output_filename(translation_filename, "imported", output_folder=config["output_folder"])
    try:
        write_ini_file(output_filename, updated_data, base_data)
    except CodepageError as e:
        print(f"Error: {e} Aborting.")
        return

    snapshot = build_session_snapshot(
        os.path.basename(translation_filename),
        base_data or {},
        translation_data,
        updated_data,
        tracker.get_all_changes(),
        local_english_file_name=os.path.basename(base_filename) if base_filename else None,
    )
    session_filename = generate_output_filename(translation_filename, "session", "json", config["output_folder"])
    with open(session_filename, 'w', encoding="utf8", newline='\n') as out:
        out.write(session_to_json(snapshot))

    print(f"Output written to: {output_filename}")
    print(f"Session written to: {session_filename}")


@mainFunction
def write_default_config(config_filename=CONFIG_FILENAME):
    """
    Write the default settings to a YAML file to start customizing them.

    Args:
        config_filename (str): Defaults to inilang.yaml.
    """
    write_config(config_filename)
    print(f"Configuration written to: {config_filename}")


# To run the main function
if __name__ == "__main__":
    main()
