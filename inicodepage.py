# -*- coding: utf-8 -*-
import re
import codecs
import unicodedata
from icu import Locale, Normalizer2

"""
Windows translation files carry no out-of-band charset. The only way to know how
to read one is the LANGID=<digits> line near the top of the file, so a missing or
unknown LANGID is always an error. Guessing a codepage silently mangles every
non-ASCII string in the file.
"""

# Matches the locale marker in the leading bytes of a file, such as 'LANGID=1049'
reLangIdMarker = re.compile(r'\bLANGID\s*=\s*(\d+)')

# Number of leading bytes scanned for the locale marker
LANGID_WINDOW = 100

UNICODE_FALLBACK = "utf-8"


class CodepageError(ValueError):
    pass


class LocaleMarkerError(CodepageError):
    pass


class UnknownLocaleError(CodepageError):
    pass


class CodepageDecodeError(CodepageError):
    pass


class CodepageEncodeError(CodepageError):
    pass


# LCID -> (locale, codec) ------------------------------------------------------
LCID_CODEPAGES = {
    # Western European (cp1252)
    1033: ("en_US", "cp1252"),
    2057: ("en_GB", "cp1252"),
    3081: ("en_AU", "cp1252"),
    4105: ("en_CA", "cp1252"),
    5129: ("en_NZ", "cp1252"),
    6153: ("en_IE", "cp1252"),
    7177: ("en_ZA", "cp1252"),
    1031: ("de_DE", "cp1252"),
    2055: ("de_CH", "cp1252"),
    3079: ("de_AT", "cp1252"),
    4103: ("de_LU", "cp1252"),
    5127: ("de_LI", "cp1252"),
    1036: ("fr_FR", "cp1252"),
    2060: ("fr_BE", "cp1252"),
    3084: ("fr_CA", "cp1252"),
    4108: ("fr_CH", "cp1252"),
    5132: ("fr_LU", "cp1252"),
    1034: ("es_ES", "cp1252"),  # traditional sort
    3082: ("es_ES", "cp1252"),  # modern sort
    2058: ("es_MX", "cp1252"),
    9226: ("es_CO", "cp1252"),
    11274: ("es_AR", "cp1252"),
    13322: ("es_CL", "cp1252"),
    1040: ("it_IT", "cp1252"),
    2064: ("it_CH", "cp1252"),
    2070: ("pt_PT", "cp1252"),
    1046: ("pt_BR", "cp1252"),
    1043: ("nl_NL", "cp1252"),
    2067: ("nl_BE", "cp1252"),
    1053: ("sv_SE", "cp1252"),
    1044: ("nb_NO", "cp1252"),
    2068: ("nn_NO", "cp1252"),
    1030: ("da_DK", "cp1252"),
    1035: ("fi_FI", "cp1252"),
    1039: ("is_IS", "cp1252"),
    1080: ("fo_FO", "cp1252"),
    1027: ("ca_ES", "cp1252"),
    1069: ("eu_ES", "cp1252"),
    1110: ("gl_ES", "cp1252"),
    1078: ("af_ZA", "cp1252"),
    1057: ("id_ID", "cp1252"),
    1086: ("ms_MY", "cp1252"),
    1089: ("sw_KE", "cp1252"),

    # Central European (cp1250)
    1045: ("pl_PL", "cp1250"),
    1029: ("cs_CZ", "cp1250"),
    1038: ("hu_HU", "cp1250"),
    1048: ("ro_RO", "cp1250"),
    1050: ("hr_HR", "cp1250"),
    1051: ("sk_SK", "cp1250"),
    1060: ("sl_SI", "cp1250"),
    1052: ("sq_AL", "cp1250"),
    2074: ("sr_Latn_RS", "cp1250"),
    5146: ("bs_Latn_BA", "cp1250"),

    # Cyrillic (cp1251)
    1049: ("ru_RU", "cp1251"),
    2073: ("ru_MD", "cp1251"),
    1058: ("uk_UA", "cp1251"),
    1059: ("be_BY", "cp1251"),
    1026: ("bg_BG", "cp1251"),
    1071: ("mk_MK", "cp1251"),
    3098: ("sr_Cyrl_RS", "cp1251"),
    1087: ("kk_KZ", "cp1251"),
    1088: ("ky_KG", "cp1251"),
    1092: ("tt_RU", "cp1251"),
    1104: ("mn_MN", "cp1251"),
    1064: ("tg_Cyrl_TJ", "cp1251"),
    2092: ("az_Cyrl_AZ", "cp1251"),
    2115: ("uz_Cyrl_UZ", "cp1251"),

    # Greek (cp1253)
    1032: ("el_GR", "cp1253"),

    # Turkish (cp1254)
    1055: ("tr_TR", "cp1254"),
    1068: ("az_Latn_AZ", "cp1254"),
    1091: ("uz_Latn_UZ", "cp1254"),

    # Hebrew (cp1255)
    1037: ("he_IL", "cp1255"),

    # Arabic (cp1256)
    1025: ("ar_SA", "cp1256"),
    2049: ("ar_IQ", "cp1256"),
    3073: ("ar_EG", "cp1256"),
    5121: ("ar_DZ", "cp1256"),
    14337: ("ar_AE", "cp1256"),
    1065: ("fa_IR", "cp1256"),
    1056: ("ur_PK", "cp1256"),

    # Baltic (cp1257)
    1061: ("et_EE", "cp1257"),
    1062: ("lv_LV", "cp1257"),
    1063: ("lt_LT", "cp1257"),

    # Vietnamese (cp1258)
    1066: ("vi_VN", "cp1258"),

    # Thai (cp874)
    1054: ("th_TH", "cp874"),

    # Japanese (cp932, the Windows superset of Shift-JIS)
    1041: ("ja_JP", "cp932"),

    # Korean (cp949, the Windows superset of EUC-KR)
    1042: ("ko_KR", "cp949"),

    # Chinese Simplified
    2052: ("zh_CN", "gb18030"),
    4100: ("zh_SG", "gb18030"),

    # Chinese Traditional
    1028: ("zh_TW", "cp950"),
    3076: ("zh_HK", "cp950"),
    5124: ("zh_MO", "cp950"),

    # No usable ANSI codepage, files are stored as UTF-8
    1067: ("hy_AM", UNICODE_FALLBACK),
    1079: ("ka_GE", UNICODE_FALLBACK),
    1081: ("hi_IN", UNICODE_FALLBACK),
    1093: ("bn_IN", UNICODE_FALLBACK),
    1094: ("pa_IN", UNICODE_FALLBACK),
    1095: ("gu_IN", UNICODE_FALLBACK),
    1096: ("or_IN", UNICODE_FALLBACK),
    1097: ("ta_IN", UNICODE_FALLBACK),
    1098: ("te_IN", UNICODE_FALLBACK),
    1099: ("kn_IN", UNICODE_FALLBACK),
    1100: ("ml_IN", UNICODE_FALLBACK),
    1101: ("as_IN", UNICODE_FALLBACK),
    1102: ("mr_IN", UNICODE_FALLBACK),
    1103: ("sa_IN", UNICODE_FALLBACK),
    1121: ("ne_NP", UNICODE_FALLBACK),
}

SUPPORTED_ENCODINGS = frozenset(codec for _, codec in LCID_CODEPAGES.values())


def _to_lcid(lcid):
    if isinstance(lcid, bool):
        return None
    if isinstance(lcid, int):
        return lcid
    if isinstance(lcid, str) and lcid.strip().isdigit():
        return int(lcid.strip())
    return None


def get_encoding_for_lcid(lcid):
    """
    Get the legacy codepage used by files written for a Windows locale id.

    Args:
        lcid (int or str): The LANGID value, e.g. 1049 or "1049".

    Returns:
        str or None: A Python codec name such as 'cp1251', or None when the id
        is not in LCID_CODEPAGES. Unknown ids never fall back to a default.
    """
    entry = LCID_CODEPAGES.get(_to_lcid(lcid))
    if entry is None:
        return None
    return entry[1]


def get_lcid_info(lcid):
    """Return {'lcid', 'locale', 'encoding', 'displayName'} for a known LANGID, else None."""
    number = _to_lcid(lcid)
    entry = LCID_CODEPAGES.get(number)
    if entry is None:
        return None
    locale_tag, encoding = entry
    display_name = Locale(locale_tag).getDisplayName(Locale.getEnglish())
    return {
        "lcid": number,
        "locale": locale_tag,
        "encoding": encoding,
        "displayName": display_name,
    }


def is_encoding_supported(encoding):
    if not encoding:
        return False
    try:
        name = codecs.lookup(encoding).name
    except LookupError:
        return False
    return any(codecs.lookup(codec).name == name for codec in SUPPORTED_ENCODINGS)


# Decoding and encoding --------------------------------------------------------
def find_langid(raw_bytes, window=LANGID_WINDOW):
    """
    Read the LANGID marker from the first `window` bytes of a file.

    The window is read as 7-bit text, so the marker is found no matter which
    codepage the rest of the file uses.

    Raises:
        LocaleMarkerError: When no LANGID=<digits> marker is present in the window.
    """
    head = bytes(raw_bytes[:window]).decode("ascii", errors="replace")
    match = reLangIdMarker.search(head)
    if not match:
        raise LocaleMarkerError(f"No LANGID marker found in the first {window} bytes.")
    return int(match.group(1))


def decode_lang_bytes(raw_bytes, window=LANGID_WINDOW):
    """
    Decode a whole translation file using the codepage named by its LANGID.

    Args:
        raw_bytes (bytes): Complete file contents.
        window (int): Number of leading bytes searched for the marker.

    Returns:
        str: The decoded text.

    Raises:
        LocaleMarkerError: No marker in the leading window.
        UnknownLocaleError: The marker names an id missing from LCID_CODEPAGES.
        CodepageDecodeError: The buffer is not valid in the resolved codepage.
    """
    lcid = find_langid(raw_bytes, window)
    encoding = get_encoding_for_lcid(lcid)
    if encoding is None:
        raise UnknownLocaleError(f"Unknown LANGID {lcid}. Unable to determine the file encoding.")

    codec = "utf-8-sig" if encoding == UNICODE_FALLBACK else encoding
    try:
        return bytes(raw_bytes).decode(codec)
    except UnicodeDecodeError as e:
        raise CodepageDecodeError(
            f"Byte 0x{e.object[e.start]:02X} at offset {e.start} is not valid {encoding} (LANGID {lcid})."
        ) from e


def encode_lang_text(text, encoding):
    """
    Encode text to a legacy codepage without any substitution.

    The text is encoded exactly as given, so decoded files write back byte for
    byte. Only when that fails is it NFC normalized and tried again, so
    decomposed accents typed in an editor still map onto the precomposed
    characters the codepages contain.

    Raises:
        CodepageEncodeError: A character has no representation in `encoding`.
    """
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise CodepageEncodeError(f"Unknown encoding '{encoding}'.") from e

    try:
        return text.encode(encoding)
    except UnicodeEncodeError:
        text = Normalizer2.getNFCInstance().normalize(text)

    try:
        return text.encode(encoding)
    except UnicodeEncodeError as e:
        char = e.object[e.start]
        line_number = e.object.count("\n", 0, e.start) + 1
        char_name = unicodedata.name(char, "unnamed character")
        raise CodepageEncodeError(
            f"Character '{char}' (U+{ord(char):04X} {char_name}) on line {line_number} cannot be encoded as {encoding}."
        ) from e
