"""
Lenient repair of the near-JSON that language models produce.

Models regularly return JSON with small defects: raw newlines inside string
values, unescaped quotes inside strings, stray backslashes, missing commas
between members and trailing commas. ``repair`` fixes these in a single pass
with a three-state scanner:

    NORMAL     outside any string literal
    IN_STRING  inside a string literal
    ESCAPED    inside a string literal, right after a backslash

Transitions:

    NORMAL     "        -> IN_STRING  (comma inserted if the previous value ended
                                       with " } or ] and none follows it)
    NORMAL     { [      -> NORMAL     (same comma insertion after } or ] or ")
    NORMAL     } ]      -> NORMAL     (trailing comma before it removed)
    IN_STRING  \\        -> ESCAPED    (backslash held back)
    IN_STRING  "        -> NORMAL     if the next non-blank char is : , } ] " or
                                       end of text, else written as \\"
    IN_STRING  \\n \\r    -> IN_STRING  (written as the \\n escape)
    ESCAPED    valid    -> IN_STRING  (" \\ / b f n r t and \\uXXXX kept)
    ESCAPED    newline  -> IN_STRING  (written as the \\n escape)
    ESCAPED    other    -> IN_STRING  (stray backslash dropped, char re-read)

Text that is already valid JSON passes through unchanged.
"""

import json
from enum import Enum
from typing import Any

from recipegen.errors import MalformedModelOutput, truncate
from recipegen.services.sanitizer import sanitize


class ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


WHITESPACE = frozenset(" \t\n\r")

# A quote inside a string only closes it when followed by one of these
CLOSING_FOLLOWERS = frozenset(':,}]"')

VALUE_ENDS = frozenset('"}]')
SIMPLE_ESCAPES = frozenset('"\\/bfnrt')
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _next_significant(text: str, start: int) -> str:
    """First non-whitespace character at or after ``start`` ('' at end)."""
    i = start
    while i < len(text) and text[i] in WHITESPACE:
        i += 1
    return text[i] if i < len(text) else ""


def _last_significant(out: list[str]) -> int:
    """Index of the last non-whitespace chunk written so far (-1 if none)."""
    i = len(out) - 1
    while i >= 0 and out[i] in WHITESPACE:
        i -= 1
    return i


def _is_unicode_escape(text: str, start: int) -> bool:
    digits = text[start:start + 4]
    return len(digits) == 4 and all(c in HEX_DIGITS for c in digits)


def repair(text: str) -> str:
    """Repair common model JSON defects so ``json.loads`` can read the text."""
    out: list[str] = []
    state = ScanState.NORMAL
    i = 0

    while i < len(text):
        c = text[i]

        if state is ScanState.NORMAL:
            if c in '"{[':
                last = _last_significant(out)
                if last >= 0 and out[last] in VALUE_ENDS:
                    out.insert(last + 1, ",")
                out.append(c)
                if c == '"':
                    state = ScanState.IN_STRING
            elif c in "}]":
                last = _last_significant(out)
                if last >= 0 and out[last] == ",":
                    del out[last]
                out.append(c)
            elif c in WHITESPACE or ord(c) >= 0x20:
                out.append(c)
            i += 1

        elif state is ScanState.IN_STRING:
            if c == "\\":
                state = ScanState.ESCAPED
            elif c == '"':
                follower = _next_significant(text, i + 1)
                if follower == "" or follower in CLOSING_FOLLOWERS:
                    out.append(c)
                    state = ScanState.NORMAL
                else:
                    # Quote that belongs to the value itself
                    out.append('\\"')
            elif c in "\n\r":
                out.append("\\n")
            elif c == "\t":
                out.append("\\t")
            elif ord(c) >= 0x20:
                out.append(c)
            i += 1

        else:  # ScanState.ESCAPED
            state = ScanState.IN_STRING
            if c in SIMPLE_ESCAPES:
                out.append("\\" + c)
                i += 1
            elif c == "u" and _is_unicode_escape(text, i + 1):
                out.append("\\u" + text[i + 1:i + 5])
                i += 5
            elif c in "\n\r":
                out.append("\\n")
                i += 1
            # Anything else: drop the backslash and read c again as string content

    # Truncated output: close the last string so the parser sees the real problem
    if state is not ScanState.NORMAL:
        out.append('"')

    return "".join(out)


def parse_model_output(raw: str) -> Any:
    """
    Sanitize, repair and strictly parse raw model output.

    Raises MalformedModelOutput (with the repaired text, truncated) when the
    result still isn't valid JSON. Repair is never retried.
    """
    repaired = repair(sanitize(raw))
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as e:
        print(f"❌ JSON parsing failed. Repaired JSON: {truncate(repaired)}")
        raise MalformedModelOutput(str(e), repaired) from e
