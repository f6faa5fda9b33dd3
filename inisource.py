# -*- coding: utf-8 -*-
import os

from inicodepage import (
    LANGID_WINDOW,
    LocaleMarkerError,
    UnknownLocaleError,
    decode_lang_bytes,
    encode_lang_text,
    get_encoding_for_lcid,
)
from iniparser import ROOT_SECTION, parse_ini, serialize_ini


def decode_ini_bytes(raw_bytes, window=LANGID_WINDOW):
    return parse_ini(decode_lang_bytes(raw_bytes, window))


def read_ini_file(filename, window=LANGID_WINDOW):
    """Read a translation file from disk and return its parsed document."""
    with open(filename, "rb") as textIns:
        raw_bytes = textIns.read()
    return decode_ini_bytes(raw_bytes, window)


def get_document_encoding(data):
    """
    Resolve the codepage of a parsed document from its root LANGID entry.

    Raises:
        LocaleMarkerError: The document has no LANGID.
        UnknownLocaleError: The LANGID is not a known locale id.
    """
    lang_id = data.get(ROOT_SECTION, {}).get("LANGID")
    if not lang_id:
        raise LocaleMarkerError("Cannot save: No LANGID found in file. LANGID is required to determine the encoding.")

    encoding = get_encoding_for_lcid(lang_id)
    if encoding is None:
        raise UnknownLocaleError(f"Cannot save: Unknown LANGID {lang_id}. Unable to determine the encoding.")
    return encoding


def encode_ini_data(data, base_order=None):
    """
    Serialize a document and encode it with the codepage its LANGID names.

    Args:
        data (dict): The translation document.
        base_order (dict, optional): Source document whose layout is reproduced.

    Returns:
        bytes: File contents ready to be written.
    """
    encoding = get_document_encoding(data)
    return encode_lang_text(serialize_ini(data, base_order), encoding)


def write_ini_file(filename, data, base_order=None):
    encoded = encode_ini_data(data, base_order)
    with open(filename, "wb") as out:
        out.write(encoded)
    return filename


class LocalTranslationSource:
    """
    A folder of translation files next to their source (base) file.

    Offers the two operations the editor needs from a repository: listing the
    available translations and fetching one of them as a parsed document.
    """

    def __init__(self, folder, base_filename="english.ini", extension=".ini", window=LANGID_WINDOW):
        self.folder = folder
        self.base_filename = base_filename
        self.extension = extension
        self.window = window

    def list_translations(self):
        names = []
        for filename in os.listdir(self.folder):
            if not filename.lower().endswith(self.extension.lower()):
                continue
            if filename.lower() == self.base_filename.lower():
                continue
            if os.path.isfile(os.path.join(self.folder, filename)):
                names.append(filename)
        return sorted(names)

    def fetch_translation(self, filename):
        path = os.path.join(self.folder, os.path.basename(filename))
        if not os.path.isfile(path):
            raise FileNotFoundError(f"File {filename} not found in {self.folder}.")
        return read_ini_file(path, self.window)

    def fetch_base(self):
        return self.fetch_translation(self.base_filename)
