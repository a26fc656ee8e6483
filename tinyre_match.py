# tiny regular expressions: the backtracking matcher.
# Two input streams (pattern and text) are consumed left to right by
# recursive descent. A `c*` tries the shortest run of `c` first and
# extends it one character at a time until the rest of the pattern fits
# or the run can't grow any further.
#
# Everything here is a pure function of (pattern, text): no shared
# state, so any number of threads can match against the same Pattern.

import logging
import time
from typing import Optional, Union

from tinyre_pattern import Pattern

LOGGER = logging.getLogger(__name__)


class MatchTimeout(Exception):
    # Raised only when a caller asked for a timeout and it ran out.
    # "Timed out" is not the same answer as "no match".
    def __init__(self, pattern, text_length, timeout):
        super().__init__(
            f"matching {pattern} against {text_length} characters "
            f"exceeded {timeout}s")
        self.pattern = pattern
        self.text_length = text_length
        self.timeout = timeout


class _Deadline:
    # Per-call deadline, passed down the recursion rather than kept
    # in module state, so concurrent calls keep their own clocks.
    def __init__(self, pattern, text_length, timeout):
        self.pattern = pattern
        self.text_length = text_length
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout

    def check(self):
        if time.monotonic() >= self.expires_at:
            raise MatchTimeout(self.pattern, self.text_length, self.timeout)


def _as_pattern(pattern):
    if isinstance(pattern, Pattern):
        return pattern
    return Pattern(pattern)


def match_here(regexp: str, text: str, deadline=None) -> bool:
    # Does all of `regexp` match some prefix of `text`?
    # Cases are checked in order; the first that applies decides.

    # nothing left to match: matches anywhere, end of text included
    if not regexp:
        return True

    # atom followed by '*': hand over to the repetition helper
    if len(regexp) >= 2 and regexp[1] == '*':
        return match_star(regexp[0], regexp[2:], text, deadline)

    # '$' as the very last pattern character: only the end of text will do
    if regexp == '$':
        return not text

    # one character matches: drop it from both and keep going
    if text and (regexp[0] == '.' or regexp[0] == text[0]):
        return match_here(regexp[1:], text[1:], deadline)

    return False


def match_star(c: str, regexp: str, text: str, deadline=None) -> bool:
    # Zero or more `c` at the start of `text`, followed by `regexp`.
    # Zero repetitions are tried first, then one, then two...
    i = 0
    while True:
        if deadline is not None:
            deadline.check()
        if match_here(regexp, text[i:], deadline):
            return True
        # the run of `c` can't be extended any further
        if i == len(text) or (text[i] != c and c != '.'):
            return False
        i += 1


def search(pattern: Union[Pattern, str], text: str,
           timeout: Optional[float] = None) -> Optional[int]:
    """
    Find the first text offset where the pattern matches.

    A pattern starting with '^' gets exactly one attempt, at offset 0.
    Otherwise every offset from 0 to len(text) is tried in order; the
    last one is the empty suffix, which is what lets '' or 'a*' match ''.

    Returns the offset, or None if there is no match. Raises MatchTimeout
    if `timeout` seconds pass before an answer is known.
    """
    pattern = _as_pattern(pattern)
    if not isinstance(text, str):
        raise TypeError(f"text must be str, not {type(text).__name__}")

    deadline = None
    if timeout is not None:
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout!r}")
        deadline = _Deadline(pattern, len(text), timeout)

    try:
        found = _search(pattern, text, deadline)
    except MatchTimeout:
        LOGGER.debug("Gave up matching %s against %d characters after %ss",
                     pattern, len(text), timeout)
        raise

    LOGGER.debug("Matched %s against %d characters: offset %s",
                 pattern, len(text), found)
    return found


def _search(pattern, text, deadline):
    if pattern.anchored:
        if deadline is not None:
            deadline.check()
        return 0 if match_here(pattern.body, text, deadline) else None

    regexp = pattern.source
    for start_pos in range(len(text) + 1):
        if deadline is not None:
            deadline.check()
        if match_here(regexp, text[start_pos:], deadline):
            return start_pos
    return None


def is_match(pattern: Union[Pattern, str], text: str,
             timeout: Optional[float] = None) -> bool:
    # True if `text` contains a match of `pattern` (or starts with one,
    # for a '^' pattern).
    return search(pattern, text, timeout) is not None
