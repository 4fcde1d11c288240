"""Unpacker for the dictionary-packed chapter scripts.

Chapter pages ship their image manifest inside a minified script whose
identifiers were replaced by short symbols.  The symbols are positional:
symbol ``n`` is ``n`` written in the packer's mixed base, and the word it
stands for is entry ``n`` of a ``|``-delimited word list.  Rebuilding the
symbol table and substituting every word token restores the original
script, from which the JSON manifest is cut out.
"""
from __future__ import annotations

import json
import re
from typing import Dict, List, Sequence

from .errors import DecodeError, StructuralError
from .log import log_debug
from .models import ChapterManifest, PackedScript

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_RADIX = 62

_WORD_RE = re.compile(r"\b\w+\b")
# Greedy lead-in: the last parenthesised object on the line wins.
_OBJECT_RE = re.compile(r".*\((\{.*\})\).*")


def _check_radix(radix: int) -> None:
    if radix > MAX_RADIX:
        raise StructuralError(
            f"Unsupported radix {radix}: at most {MAX_RADIX} symbols are defined."
        )
    if radix < 2:
        raise StructuralError(f"Unsupported radix {radix}: must be at least 2.")


def _symbol(value: int, radix: int) -> str:
    if value > 35:
        return chr(value % radix + 29)
    return _DIGITS[value]


def encode_key(index: int, radix: int) -> str:
    """Returns the packer symbol for ``index``."""
    _check_radix(radix)
    return _encode(index, radix)


def _encode(index: int, radix: int) -> str:
    if index < radix:
        return _symbol(index, radix)
    return _encode(index // radix, radix) + _symbol(index % radix, radix)


def build_token_dictionary(
    radix: int, dictionary_size: int, entries: Sequence[str]
) -> Dict[str, str]:
    """Maps every packer symbol below ``dictionary_size`` to its word.

    Entries are inserted from the highest index down so that, should two
    indices share a symbol, the lower index is the one that survives.  An
    empty entry means the symbol stands for itself.
    """
    _check_radix(radix)
    if dictionary_size < 0:
        raise StructuralError(f"Negative dictionary size {dictionary_size}.")
    if dictionary_size > len(entries):
        raise StructuralError(
            f"Dictionary size {dictionary_size} exceeds the {len(entries)} "
            "entries in the payload."
        )

    dictionary: Dict[str, str] = {}
    for i in range(dictionary_size - 1, -1, -1):
        key = _encode(i, radix)
        dictionary[key] = entries[i] or key
    return dictionary


def substitute_tokens(body: str, dictionary: Dict[str, str]) -> str:
    return _WORD_RE.sub(lambda m: dictionary.get(m.group(0), m.group(0)), body)


def extract_manifest(script: str) -> ChapterManifest:
    match = _OBJECT_RE.search(script)
    if not match:
        raise StructuralError("Could not find JSON data in unpacked script.")

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Unpacked chapter data is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise StructuralError("Unpacked chapter data is not an object.")
    sl = data.get("sl")
    path = data.get("path")
    files = data.get("files")
    if not isinstance(sl, dict) or not isinstance(path, str):
        raise StructuralError("Chapter data is missing 'sl' or 'path'.")
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise StructuralError("Chapter data 'files' is not a list of names.")

    auth_e = sl.get("e")
    # bool is an int subclass; JSON true/false is not a valid token.
    if isinstance(auth_e, bool) or not isinstance(auth_e, (str, int, float)):
        raise StructuralError("sl.e is not a string or number")
    auth_m = sl.get("m")
    if not isinstance(auth_m, str):
        raise StructuralError("sl.m is not a string")

    return ChapterManifest(
        auth_e=auth_e,
        auth_m=auth_m,
        image_base_path=path,
        files=tuple(files),
    )


def unpack_manifest(packed: PackedScript) -> ChapterManifest:
    entries: List[str] = packed.entries
    dictionary = build_token_dictionary(packed.radix, packed.dictionary_size, entries)
    script = substitute_tokens(packed.body, dictionary)
    log_debug(f"  Unpacked script: {script[:200]}")
    return extract_manifest(script)


__all__ = [
    "MAX_RADIX",
    "build_token_dictionary",
    "encode_key",
    "extract_manifest",
    "substitute_tokens",
    "unpack_manifest",
]
