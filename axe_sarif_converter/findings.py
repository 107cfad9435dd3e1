from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import MalformedFinding


VIOLATION = "violation"
PASS = "pass"
INCOMPLETE = "incomplete"
INAPPLICABLE = "inapplicable"

OUTCOMES = (VIOLATION, PASS, INCOMPLETE, INAPPLICABLE)

# axe result-set key for each outcome
OUTCOME_KEYS = {
    "violations": VIOLATION,
    "passes": PASS,
    "incomplete": INCOMPLETE,
    "inapplicable": INAPPLICABLE,
}

SHADOW_SEPARATOR = " >>> "
FRAME_SEPARATOR = ";"

# A target lists one entry per frame level, outermost document first. Each
# level holds the selector chain through any nested shadow roots.
FrameLevel = Tuple[str, ...]
Target = Tuple[FrameLevel, ...]


@dataclass(frozen=True)
class CanonicalFinding:
    rule_id: str
    outcome: str
    rule_description: str = ""
    rule_help: str = ""
    help_uri: str = ""
    tags: Tuple[str, ...] = ()
    target: Optional[Target] = None
    snippet: Optional[str] = None
    message: str = ""
    impact: Optional[str] = None

    def __post_init__(self):
        if self.outcome not in OUTCOMES:
            raise MalformedFinding(f"Unknown outcome {self.outcome!r} for rule {self.rule_id!r}")
        if self.target is not None and not self.target:
            raise MalformedFinding(f"Empty target for rule {self.rule_id!r}")


def as_target(raw):
    """Convert an axe target (strings, or lists of strings for shadow DOM) into a Target."""
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise MalformedFinding(f"Target must be a list of selectors, got {type(raw).__name__}")
    levels = []
    for entry in raw:
        if isinstance(entry, str):
            levels.append((entry,))
        elif isinstance(entry, list) and entry and all(isinstance(s, str) for s in entry):
            levels.append(tuple(entry))
        else:
            raise MalformedFinding(f"Unsupported selector entry in target: {entry!r}")
    return tuple(levels) or None


def frame_level_name(level):
    return SHADOW_SEPARATOR.join(level)


def _no_space_after(ch, in_brackets):
    if in_brackets:
        return ch in "[=~|^$*"
    return ch in ">+~,("


def _no_space_before(ch, in_brackets):
    if in_brackets:
        return ch in "]=~|^$*"
    return ch in ">+~,)"


def normalize_selector(selector):
    out = []
    quote = None
    depth = 0
    pending_space = False
    i = 0
    text = selector.strip()
    while i < len(text):
        ch = text[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue
        if ch.isspace():
            pending_space = True
            i += 1
            continue
        if pending_space:
            in_brackets = depth > 0
            if out and not _no_space_after(out[-1], in_brackets) and not _no_space_before(ch, in_brackets):
                out.append(" ")
            pending_space = False
        out.append(ch)
        if ch == "\\" and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]" and depth:
            depth -= 1
        i += 1
    return "".join(out)


def normalize_target(target):
    if target is None:
        return None
    return tuple(tuple(normalize_selector(s) for s in level) for level in target)
