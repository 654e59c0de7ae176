"""
Follow-up block sanitizer.

Models are asked to close every answer with a two-option "would you also
like to know" block, but the shape they produce drifts: numeric or q-prefixed
markers, bold markers, inline options, assorted "reply 1/2" closers. This
module finds the trailing block and rewrites it into one canonical shape:

    Would you also like to know
    a) First question?
    or
    b) Second question?
    Reply a or b to confirm.

Text before the block is never touched, text without a block passes through,
and running `sanitize` on its own output returns it unchanged.
"""

from __future__ import annotations
import re
from typing import Callable, List, Optional, Sequence, Tuple

CONFIRMATION_LINE = "Reply a or b to confirm."

OPENING = re.compile(
    r"(?:\*\*|__|\*|_)?\bwould\s+(?:u|you)\s+(?:also\s+)?like\s+to\s+know\b",
    re.IGNORECASE,
)

_CONFIRMATION = re.compile(
    r"^[^\w\n]*(?:(?:please|just|simply)\s+)?"
    r"(?:reply|respond|choose|select|pick|type|answer|send|enter)\b[^\n]*?"
    r"(?<!\w)\(?[12ab]\)?\s*(?:/|or|,)\s*\(?[12ab]\)?(?!\w)[^\n]*(?:\n|$)",
    re.IGNORECASE | re.MULTILINE,
)

# 1)  1.  1:  q1)  Q1:  q1  (1)  (q1)  a)  (a)
_MARKER = r"(?:\(\s*(?:q\s*)?(?:[12]|[ab])\s*\)|q\s*[12]\s*[).:\-]?|[12]\s*[).:]|[ab]\s*\))(?!\d)"
_LINE_MARKER = re.compile(r"^[ \t]*(?:[-•][ \t]*)?" + _MARKER, re.IGNORECASE | re.MULTILINE)
_INLINE_MARKER = re.compile(r"(?<![\w(])" + _MARKER, re.IGNORECASE)
_OR_LINE = re.compile(r"^\s*or\s*$", re.IGNORECASE)

Rule = Tuple[str, Callable[[str], str]]


def locate_followup(text: str) -> Optional[int]:
    """Index where the trailing follow-up block starts, or None.

    The last opening phrase that begins its own line wins; if the phrase only
    ever appears mid-line, the last occurrence is used.
    """
    if not text:
        return None
    last_any = None
    last_line_start = None
    for m in OPENING.finditer(text):
        last_any = m.start()
        line_start = text.rfind("\n", 0, m.start()) + 1
        if not re.search(r"\w", text[line_start:m.start()]):
            last_line_start = m.start()
    return last_line_start if last_line_start is not None else last_any


# -------------------------
# Block rules (whole block)
# -------------------------
def strip_emphasis(block: str) -> str:
    return re.sub(r"\*+|__+", "", block)


def drop_confirmation_lines(block: str) -> str:
    """Blank out closer lines; the blank line ends the option before it."""
    return _CONFIRMATION.sub("\n", block)


BLOCK_RULES: Sequence[Rule] = (
    ("strip_emphasis", strip_emphasis),
    ("drop_confirmation_lines", drop_confirmation_lines),
)


# -------------------------
# Option rules (one option)
# -------------------------
def collapse_whitespace(option: str) -> str:
    return " ".join(option.split())


def drop_or_separator(option: str) -> str:
    return re.sub(r"(?:^|[\s,;])or$", "", option, flags=re.IGNORECASE).strip()


def trim_punctuation(option: str) -> str:
    option = re.sub(r"^[\s\-–—:.,;)]+", "", option)
    return re.sub(r"[\s?!.,;:]+$", "", option)


def capitalize_first(option: str) -> str:
    return option[:1].upper() + option[1:]


def end_with_question_mark(option: str) -> str:
    if not option:
        return option
    return option.rstrip("?") + "?"


OPTION_RULES: Sequence[Rule] = (
    ("collapse_whitespace", collapse_whitespace),
    ("drop_or_separator", drop_or_separator),
    ("trim_punctuation", trim_punctuation),
    ("capitalize_first", capitalize_first),
    ("end_with_question_mark", end_with_question_mark),
)


def split_options(block: str) -> Optional[Tuple[str, List[str]]]:
    """Split a block into its heading and two raw options.

    Tries line-leading markers first, then inline markers, then two bare
    lines separated by an optional "or" line.
    """
    opening = OPENING.search(block)
    if not opening:
        return None

    markers = [m for m in _LINE_MARKER.finditer(block) if m.start() >= opening.end()]
    if len(markers) < 2:
        markers = list(_INLINE_MARKER.finditer(block, opening.end()))

    if len(markers) >= 2:
        head = block[:markers[0].start()]
        first = block[markers[0].end():markers[1].start()]
        # anything past the second option (a third marker, a sign-off) is dropped
        second = _last_option(block[markers[1].end():])
        return head, [first, second]

    first_break = block.find("\n", opening.end())
    if first_break == -1:
        return None
    lines = []
    for ln in block[first_break + 1:].splitlines():
        if not ln.strip():
            if len(lines) >= 2:
                break
            continue
        if not _OR_LINE.match(ln):
            lines.append(ln)
    if len(lines) != 2:
        return None
    return block[:first_break], lines


def _last_option(text: str) -> str:
    """First line of `text` plus any lowercase continuation lines."""
    lines = text.split("\n")
    option = lines[0]
    for ln in lines[1:]:
        ln = ln.strip()
        if not ln or not ln[0].islower() or option.rstrip().endswith(("?", ".", "!")):
            break
        option += " " + ln
    return option


def _apply(rules: Sequence[Rule], text: str) -> str:
    for _name, rule in rules:
        text = rule(text)
    return text


def rewrite_block(block: str) -> Optional[str]:
    """Canonical form of a located block, or None if it can't be parsed."""
    cleaned = _apply(BLOCK_RULES, block)
    parts = split_options(cleaned)
    if parts is None:
        return None
    head, raw_options = parts
    options = [_apply(OPTION_RULES, o) for o in raw_options]
    if not all(options):
        return None
    return f"{head.strip()}\na) {options[0]}\nor\nb) {options[1]}\n{CONFIRMATION_LINE}"


def sanitize(text: str) -> str:
    start = locate_followup(text)
    if start is None:
        return text
    rewritten = rewrite_block(text[start:])
    if rewritten is None:
        return text
    return text[:start] + rewritten
