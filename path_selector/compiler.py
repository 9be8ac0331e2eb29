from __future__ import annotations
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple, Union

from . import PatternSyntaxError

SegmentKind = Literal["exact", "single", "multi"]

SINGLE_WILDCARD = "*"
MULTI_WILDCARD = "**"
SEPARATOR = "."


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    value: str = ""

    @property
    def folded(self) -> str:
        return self.value.lower()


@dataclass(frozen=True)
class CompiledPattern:
    raw: str
    segments: Tuple[Segment, ...]
    capability: Optional[str] = None

    @property
    def filter_only(self) -> bool:
        """True for patterns like "[light]": no path part, any path length."""
        return not self.segments and self.capability is not None

    @property
    def has_multi(self) -> bool:
        return any(s.kind == "multi" for s in self.segments)


def _classify(seg: str) -> Segment:
    if seg == MULTI_WILDCARD:
        return Segment("multi")
    if seg == SINGLE_WILDCARD:
        return Segment("single")
    return Segment("exact", seg)


def _extract_filter(raw: str) -> Tuple[str, Optional[str]]:
    """
    Pull the single "[name]" token out of the pattern text.
    Returns (remaining text, capability name or None). The token may sit anywhere;
    separators left dangling by its removal are dropped.
    """
    start = raw.find("[")
    if start == -1:
        if "]" in raw:
            raise PatternSyntaxError(raw, "unmatched ']'")
        return raw, None

    end = raw.find("]", start)
    if end == -1:
        raise PatternSyntaxError(raw, "unterminated '['")
    name = raw[start + 1:end]
    if "[" in name:
        raise PatternSyntaxError(raw, "unterminated '['")
    if not name:
        raise PatternSyntaxError(raw, "empty capability filter '[]'")

    before, after = raw[:start], raw[end + 1:]
    if "[" in after:
        raise PatternSyntaxError(raw, "only one capability filter is allowed")
    if "]" in before or "]" in after:
        raise PatternSyntaxError(raw, "unmatched ']'")

    if before and after:
        if before.endswith(SEPARATOR) and after.startswith(SEPARATOR):
            after = after[1:]
        elif not before.endswith(SEPARATOR) and not after.startswith(SEPARATOR):
            raise PatternSyntaxError(raw, "capability filter splits a segment")
    elif before.endswith(SEPARATOR):
        before = before[:-1]
    elif after.startswith(SEPARATOR):
        after = after[1:]
    return before + after, name


def compile_pattern(raw: str) -> CompiledPattern:
    """
    Compile pattern text into segment matchers plus an optional capability filter.
      - 'name' matches exactly one equal segment
      - '*' matches exactly one segment of any value
      - '**' matches zero or more segments
      - '[cap]' (anywhere in the text) requires the entity to have capability 'cap'
    Raises PatternSyntaxError on malformed text.
    """
    if not isinstance(raw, str):
        raise TypeError(f"pattern must be a string, got {type(raw).__name__}")
    if raw == "":
        raise PatternSyntaxError(raw, "empty pattern")

    text, capability = _extract_filter(raw)
    if text == "":
        return CompiledPattern(raw=raw, segments=(), capability=capability)

    segments: List[Segment] = []
    for seg in text.split(SEPARATOR):
        if seg == "":
            raise PatternSyntaxError(raw, "empty segment")
        segment = _classify(seg)
        if segment.kind == "multi" and segments and segments[-1].kind == "multi":
            raise PatternSyntaxError(raw, "adjacent '**' tokens")
        segments.append(segment)
    return CompiledPattern(raw=raw, segments=tuple(segments), capability=capability)


def pattern_syntax_check(raw: str) -> List[str]:
    """Validate pattern text. Returns error messages; never raises."""
    try:
        compile_pattern(raw)
    except (PatternSyntaxError, TypeError) as e:
        return [str(e)]
    return []


def split_path(path: Union[str, Sequence[str]], case_sensitive: bool = True) -> Tuple[str, ...]:
    """
    Split a dotted node path into segments. '' is the empty (root) path.
    Empty segments ('a..b') are kept so matching can reject them.
    """
    if isinstance(path, str):
        segs = tuple(path.split(SEPARATOR)) if path else ()
    else:
        segs = tuple(path)
    if not case_sensitive:
        segs = tuple(s.lower() for s in segs)
    return segs
