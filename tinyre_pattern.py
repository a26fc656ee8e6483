# tiny regular expressions: the pattern side.
# supported syntax:
#   ^   start anchor (first character only)
#   $   end anchor (last character only)
#   .   any single character
#   c*  zero or more of the preceding atom
# everything else is a literal, including ? + | ( ) [ ] and backslash.

from dataclasses import dataclass


class PatternError(ValueError):
    pass


@dataclass(frozen=True)
class Pattern:
    # Immutable wrapper around the raw pattern text.
    # Holds no matching logic; see tinyre_match for that.
    source: str

    def __post_init__(self):
        if not isinstance(self.source, str):
            raise TypeError(
                f"pattern source must be str, not {type(self.source).__name__}")

    @classmethod
    def strict(cls, source: str) -> "Pattern":
        """
        Build a pattern, rejecting a '*' that has no atom to repeat.
        The plain constructor accepts these and they simply never match
        the way a reader would expect.
        """
        pattern = cls(source)
        body = pattern.body
        for i, c in enumerate(body):
            if c != '*':
                continue
            # a star at the very start, or right after another star's atom
            if i == 0 or (i >= 2 and body[i - 1] == '*'):
                raise PatternError(
                    f"'*' at position {i + (1 if pattern.anchored else 0)} "
                    f"has nothing to repeat in {source!r}")
        return pattern

    @property
    def chars(self):
        # ordered view for head/tail consumption
        return tuple(self.source)

    @property
    def anchored(self) -> bool:
        return self.source[:1] == '^'

    @property
    def body(self) -> str:
        # what the matcher consumes in the anchored attempt
        return self.source[1:] if self.anchored else self.source

    def debug_description(self) -> str:
        return f"{{expression: {self.source}}}"

    def __len__(self):
        return len(self.source)

    def __str__(self):
        return f"/{self.source}/"

    def __repr__(self):
        return f"Pattern({self.source!r})"
