from __future__ import annotations

from typing import Callable, List, Set


class SelectionError(ValueError):
    pass


def parse_chapter_selection(range_spec: str, total: int) -> List[int]:
    """
    Turns a one-based selection like ``1-3,5`` into sorted, de-duplicated
    zero-based indices.  ``all`` selects every chapter.
    """
    range_spec = range_spec.strip()
    if not range_spec:
        raise SelectionError("Empty selection.")
    if range_spec.lower() == "all":
        return list(range(total))

    selected: Set[int] = set()
    for part in range_spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_str, _, end_str = part.partition("-")
            try:
                start, end = int(start_str), int(end_str)
            except ValueError:
                raise SelectionError(f"Invalid range: {part!r}") from None
            if start > end:
                raise SelectionError(f"Range runs backwards: {part!r}")
        else:
            try:
                start = end = int(part)
            except ValueError:
                raise SelectionError(f"Invalid chapter number: {part!r}") from None
        if start < 1:
            raise SelectionError(f"Chapter numbers start at 1: {part!r}")
        if end > total:
            raise SelectionError(f"Chapter {end} is out of range (1-{total}).")
        selected.update(range(start - 1, end))

    if not selected:
        raise SelectionError("Empty selection.")
    return sorted(selected)


def prompt_chapter_selection(
    total: int, input_fn: Callable[[str], str] = input
) -> List[int]:
    """Asks until the answer parses against a catalog of ``total`` chapters."""
    while True:
        answer = input_fn("Select chapters (e.g. 1-3,5): ")
        try:
            return parse_chapter_selection(answer, total)
        except SelectionError as e:
            print(f"  {e} Please try again.")


__all__ = [
    "SelectionError",
    "parse_chapter_selection",
    "prompt_chapter_selection",
]
