"""
Pattern resolution for the walker.

Three layers decide whether a root-relative path is visited:

    deny list      default excludes + root ignore files (gitignore dialect)
    exclude globs  user supplied, applied to files and directories alike
    include globs  user supplied (plus language globs); empty means "all"

All three share one gitignore-style pattern type and a pure matcher, so the
semantics are the same everywhere: ``!`` re-includes, a trailing ``/``
restricts to directories, a leading or inner ``/`` anchors to the root,
``*``/``?`` stay within a segment and a whole ``**`` segment spans any number
of segments. A path is matched when it or any of its ancestor directories is.
Each glob is compiled by pathspec in its gitwildmatch dialect.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from pathspec.patterns import GitWildMatchPattern

from .constants import DEFAULT_IGNORE_PATTERNS, IGNORE_FILES, LANGUAGE_GLOBS
from .display import Display, LoggingDisplay

_WILDCARD_CHARS = "*?[\\"


# =============================================================================
# PATTERN TYPE
# =============================================================================

@dataclass(frozen=True)
class Pattern:
    """One compiled gitignore-style rule."""
    source: str
    body: str
    regex: Optional[re.Pattern] = field(default=None, compare=False)
    negated: bool = False
    dir_only: bool = False
    anchored: bool = False
    error: Optional[str] = None

    @property
    def malformed(self) -> bool:
        return self.regex is None

    @property
    def literal_prefix(self) -> str:
        """Text of the body before its first wildcard."""
        for i, ch in enumerate(self.body):
            if ch in _WILDCARD_CHARS:
                return self.body[:i]
        return self.body

    def matches(self, path: str, is_dir: bool = False) -> bool:
        """Match ``path`` against this rule alone, ignoring negation."""
        if self.regex is None:
            return False
        if self.dir_only and not is_dir:
            return False
        return self.regex.fullmatch(path) is not None


def parse_pattern(text: str) -> Optional[Pattern]:
    """Parse one line. Returns None for blank lines and comments."""
    line = text.strip()
    if not line or line.startswith("#"):
        return None

    negated = False
    if line.startswith("!"):
        negated = True
        line = line[1:]
    elif line.startswith(("\\!", "\\#")):
        line = line[1:]

    dir_only = line.endswith("/")
    body = line.rstrip("/")
    if body.startswith("./"):
        body = body[2:]
    anchored = "/" in body
    body = body.lstrip("/")

    if not body:
        return Pattern(text, body, None, negated, dir_only, anchored, "empty pattern")

    # Negation and the directory flag are tracked here, so pathspec only sees
    # the glob itself. A leading "!" or "#" in the glob stays literal.
    glob = f"/{body}" if anchored else body
    if glob[0] in "!#":
        glob = "\\" + glob
    try:
        regex = GitWildMatchPattern(glob).regex
    except (ValueError, re.error) as e:
        return Pattern(text, body, None, negated, dir_only, anchored, str(e))
    if regex is None:
        return Pattern(text, body, None, negated, dir_only, anchored, "pattern matches nothing")

    return Pattern(text, body, regex, negated, dir_only, anchored)


# =============================================================================
# PATTERN LIST
# =============================================================================

class PatternList:
    """Ordered patterns evaluated with last-match-wins semantics."""

    def __init__(self, patterns: Sequence[Pattern] = ()):
        self.patterns: Tuple[Pattern, ...] = tuple(patterns)

    @classmethod
    def compile(cls, lines: Iterable[str]) -> PatternList:
        parsed = (parse_pattern(line) for line in lines)
        return cls([p for p in parsed if p is not None])

    def __len__(self) -> int:
        return len(self.patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    @property
    def malformed(self) -> List[Pattern]:
        return [p for p in self.patterns if p.malformed]

    def _decide(self, path: str, is_dir: bool) -> bool:
        matched = False
        for pattern in self.patterns:
            if pattern.matches(path, is_dir):
                matched = not pattern.negated
        return matched

    def matches(self, path: str, is_dir: bool = False) -> bool:
        """True if ``path`` or one of its ancestor directories is matched."""
        if not path:
            return False
        parts = path.split("/")
        for i in range(1, len(parts)):
            if self._decide("/".join(parts[:i]), True):
                return True
        return self._decide(path, is_dir)


# =============================================================================
# PATTERN SET
# =============================================================================

@dataclass(frozen=True)
class PatternSet:
    """Raw pattern configuration for one walk."""
    deny: Tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()


def load_ignore_patterns(root: Path) -> List[str]:
    """Concatenate the ignore files found at ``root``, minus comments and blanks."""
    patterns: List[str] = []
    for name in IGNORE_FILES:
        try:
            text = (root / name).read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        lines = [line.strip() for line in text.splitlines()]
        patterns.extend(line for line in lines if line and not line.startswith("#"))
    return patterns


def language_globs(languages: Iterable[str], display: Optional[Display] = None) -> List[str]:
    """Include globs for the named languages, in request order."""
    display = display or LoggingDisplay()
    globs: List[str] = []
    for lang in languages:
        extensions = LANGUAGE_GLOBS.get(lang.lower())
        if extensions is None:
            display.warn(f"Unknown language filter: {lang}")
            continue
        globs.extend(g for g in extensions if g not in globs)
    return globs


def build_pattern_set(
    root: Path,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    languages: Sequence[str] = (),
    include_ignored: bool = False,
    display: Optional[Display] = None,
) -> PatternSet:
    """
    Assemble the pattern set for a walk rooted at ``root``.

    ``include_ignored`` skips the ignore files only; the default deny list
    always applies.
    """
    deny = list(DEFAULT_IGNORE_PATTERNS)
    if not include_ignored:
        deny.extend(load_ignore_patterns(root))
    includes = list(include) + language_globs(languages, display)
    return PatternSet(deny=tuple(deny), include=tuple(includes), exclude=tuple(exclude))


# =============================================================================
# RESOLVER
# =============================================================================

class PatternResolver:
    """Answers "is this path visited?" for the walker."""

    def __init__(self, pattern_set: PatternSet, display: Optional[Display] = None):
        self.display = display or LoggingDisplay()
        self.pattern_set = pattern_set
        self._warned: Set[str] = set()
        self._resolve()

    def _resolve(self) -> None:
        self._deny = PatternList.compile(self.pattern_set.deny)
        self._include = PatternList.compile(self.pattern_set.include)
        self._exclude = PatternList.compile(self.pattern_set.exclude)
        for plist in (self._deny, self._include, self._exclude):
            for pattern in plist.malformed:
                if pattern.source in self._warned:
                    continue
                self._warned.add(pattern.source)
                self.display.warn(f"Ignoring malformed pattern '{pattern.source}': {pattern.error}")

    def add_languages(self, languages: Sequence[str]) -> None:
        """Extend the include globs with language extension globs and re-resolve."""
        extra = [g for g in language_globs(languages, self.display)
                 if g not in self.pattern_set.include]
        if not extra:
            return
        self.pattern_set = replace(self.pattern_set, include=self.pattern_set.include + tuple(extra))
        self._resolve()
        logging.debug(f"Include patterns now: {self.pattern_set.include}")

    def should_ignore(self, path: str, is_dir: bool = False) -> bool:
        """True if the deny list matches ``path``."""
        return self._deny.matches(path, is_dir)

    def should_include(self, path: str, is_file: bool) -> bool:
        """Apply exclude and include globs; call after ``should_ignore``."""
        if self._exclude.matches(path, is_dir=not is_file):
            return False
        if not self._include:
            return True
        if is_file:
            return self._include.matches(path, is_dir=False)
        return self._could_contain_match(path)

    def _could_contain_match(self, dir_path: str) -> bool:
        """Conservative check that an include glob may match below ``dir_path``."""
        prefix = dir_path + "/"
        for pattern in self._include.patterns:
            if pattern.negated or pattern.malformed:
                continue
            if not pattern.anchored:
                return True
            literal = pattern.literal_prefix
            if not literal:
                return True
            if prefix.startswith(literal) or literal.startswith(prefix):
                return True
        return False
