"""Version constraint arithmetic.

Constraints are the range expressions a manifest declares for a dependency
(``^1.2``, ``~2.3.1``, ``>=1.0 <2.0``, ``1.4.*``, ``^1.0 || ^2.0``). Caret and
tilde follow the node-semver reading of those operators:

- ``~2.3.1`` allows ``>=2.3.1 <2.4.0``, ``~2.3`` allows ``>=2.3.0 <2.4.0``
- ``^1.2.3`` allows ``>=1.2.3 <2.0.0``, ``^0.2.3`` allows ``>=0.2.3 <0.3.0``

Versions are compared with semver precedence, except that a pre-release
only matches an alternative that names a pre-release of the same
``major.minor.patch`` (``1.5.0-beta`` is outside ``^1.0``). Anything that
cannot be parsed raises ConstraintError rather than being guessed at.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import semver

from ..typing import ConstraintError

_PARTIAL_RE = re.compile(
    r'^v?(?P<major>\d+|[xX*])'
    r'(?:\.(?P<minor>\d+|[xX*]))?'
    r'(?:\.(?P<patch>\d+|[xX*]))?'
    r'(?:\.\d+)?'
    r'(?:-?(?P<pre>[0-9A-Za-z]+(?:[.-][0-9A-Za-z]+)*))?'
    r'(?:\+[0-9A-Za-z.-]+)?$'
)
_OPERATOR_RE = re.compile(r'^(>=|<=|!=|==|>|<|=|\^|~)?(.*)$')
_SPACED_OPERATOR_RE = re.compile(r'(>=|<=|!=|==|>|<|=|\^|~)\s+')
_HYPHEN_RE = re.compile(r'^\s*(\S+)\s+-\s+(\S+)\s*$')
_STABILITY_RE = re.compile(r'@(dev|alpha|beta|rc|RC|stable)$')

Comparator = Tuple[str, semver.Version]


@dataclass(frozen=True)
class PartialVersion:
    """A version where trailing components may be wildcards (None)."""
    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    prerelease: Optional[str] = None

    @property
    def is_full(self) -> bool:
        return self.major is not None and self.minor is not None and self.patch is not None

    def floor(self) -> semver.Version:
        return semver.Version(self.major or 0, self.minor or 0, self.patch or 0,
                              prerelease=self.prerelease if self.is_full else None)


def _component(value: Optional[str]) -> Optional[int]:
    if value is None or value in ('x', 'X', '*'):
        return None
    return int(value)


def parse_partial(text: str) -> PartialVersion:
    """Parse ``1``, ``1.2``, ``1.2.x``, ``v1.2.3-beta.1`` and friends."""
    match = _PARTIAL_RE.match(text.strip())
    if not match:
        raise ConstraintError(f"Invalid version '{text}'")
    major = _component(match.group('major'))
    minor = _component(match.group('minor'))
    patch = _component(match.group('patch'))
    # Once a component is a wildcard everything after it is too
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None
    pre = match.group('pre')
    if pre is not None and patch is None:
        raise ConstraintError(f"Invalid version '{text}'")
    return PartialVersion(major, minor, patch, pre)


def parse_version(text: str) -> semver.Version:
    """Parse a concrete version; missing minor/patch components count as zero."""
    if text is None or not str(text).strip():
        raise ConstraintError("Missing version")
    partial = parse_partial(str(text))
    if partial.major is None:
        raise ConstraintError(f"Invalid version '{text}'")
    return partial.floor()


def _upper(major: int, minor: int = 0, patch: int = 0) -> semver.Version:
    return semver.Version(major, minor, patch)


def _caret(p: PartialVersion) -> List[Comparator]:
    if p.major is None:
        return []
    low = p.floor()
    if p.major > 0 or p.minor is None:
        return [('>=', low), ('<', _upper(p.major + 1))]
    if p.minor > 0 or p.patch is None:
        return [('>=', low), ('<', _upper(0, p.minor + 1))]
    return [('>=', low), ('<', _upper(0, 0, p.patch + 1))]


def _tilde(p: PartialVersion) -> List[Comparator]:
    if p.major is None:
        return []
    low = p.floor()
    if p.minor is None:
        return [('>=', low), ('<', _upper(p.major + 1))]
    return [('>=', low), ('<', _upper(p.major, p.minor + 1))]


def _xrange(p: PartialVersion) -> List[Comparator]:
    if p.major is None:
        return []
    if p.minor is None:
        return [('>=', p.floor()), ('<', _upper(p.major + 1))]
    if p.patch is None:
        return [('>=', p.floor()), ('<', _upper(p.major, p.minor + 1))]
    return [('=', p.floor())]


def _next_after(p: PartialVersion) -> Optional[semver.Version]:
    """First version above every version the partial matches."""
    if p.major is None:
        return None
    if p.minor is None:
        return _upper(p.major + 1)
    if p.patch is None:
        return _upper(p.major, p.minor + 1)
    return None


def _comparator(token: str) -> List[Comparator]:
    match = _OPERATOR_RE.match(token)
    if match is None:
        raise ConstraintError(f"Invalid constraint '{token}'")
    operator = match.group(1) or ''
    version_text = match.group(2)
    if not version_text:
        raise ConstraintError(f"Invalid constraint '{token}'")
    p = parse_partial(version_text)

    if operator == '^':
        return _caret(p)
    if operator == '~':
        return _tilde(p)
    if operator in ('', '=', '=='):
        return _xrange(p)
    if operator == '!=':
        return [('!=', p.floor())] if p.is_full else []
    if p.major is None:
        # '>=*' and friends match everything, '<*' and '>*' nothing
        return [] if operator in ('>=', '<=') else [('<', _upper(0))]
    if operator == '>=':
        return [('>=', p.floor())]
    if operator == '<':
        return [('<', p.floor())]
    nxt = _next_after(p)
    if operator == '>':
        return [('>=', nxt)] if nxt else [('>', p.floor())]
    # '<='
    return [('<', nxt)] if nxt else [('<=', p.floor())]


def _alternative(text: str) -> List[Comparator]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low = parse_partial(hyphen.group(1))
        high = parse_partial(hyphen.group(2))
        comparators: List[Comparator] = []
        if low.major is not None:
            comparators.append(('>=', low.floor()))
        if high.major is not None:
            nxt = _next_after(high)
            comparators.append(('<', nxt) if nxt else ('<=', high.floor()))
        return comparators

    text = _SPACED_OPERATOR_RE.sub(r'\1', text)
    comparators = []
    for token in re.split(r'[\s,]+', text.strip()):
        if token:
            comparators.extend(_comparator(token))
    return comparators


def parse_constraint(constraint: str) -> List[List[Comparator]]:
    """Parse a constraint into alternatives of comparator sets."""
    if constraint is None or not str(constraint).strip():
        raise ConstraintError("Missing version constraint")
    text = str(constraint).strip()
    alternatives: List[List[Comparator]] = []
    for part in re.split(r'\s*\|\|?\s*', text):
        part = _STABILITY_RE.sub('', part.strip())
        if not part:
            raise ConstraintError(f"Invalid constraint '{constraint}'")
        try:
            alternatives.append(_alternative(part))
        except ConstraintError:
            raise ConstraintError(f"Invalid constraint '{constraint}'")
    return alternatives


def _holds(version: semver.Version, comparator: Comparator) -> bool:
    operator, bound = comparator
    if operator == '>=':
        return version >= bound
    if operator == '>':
        return version > bound
    if operator == '<=':
        return version <= bound
    if operator == '<':
        return version < bound
    if operator == '!=':
        return version != bound
    return version == bound


def _admits_prerelease(version: semver.Version, alternative: List[Comparator]) -> bool:
    release = (version.major, version.minor, version.patch)
    return any(bound.prerelease and (bound.major, bound.minor, bound.patch) == release
               for _, bound in alternative)


def satisfies(version: str, constraint: str) -> bool:
    """Whether a concrete version is allowed by a constraint.

    A pre-release version is only considered by alternatives that carry a
    pre-release bound on the same release line.
    """
    parsed = parse_version(version)
    return any(
        all(_holds(parsed, comparator) for comparator in alternative)
        and (not parsed.prerelease or _admits_prerelease(parsed, alternative))
        for alternative in parse_constraint(constraint)
    )


def _strip_v(version: str) -> str:
    version = version.strip()
    if version[:1] in ('v', 'V') and version[1:2].isdigit():
        return version[1:]
    return version


def resolve_constraint(current: str, target: str) -> str:
    """New constraint for updating to ``target``, keeping the style of ``current``.

    - unchanged when ``target`` already satisfies ``current``
    - ``~X.Y.Z`` becomes ``~<target>``
    - ``~X.Y`` becomes ``~<target major>.<target minor>``
    - anything else becomes ``^<target>``
    """
    if current is None or not str(current).strip():
        raise ConstraintError("Missing version constraint")
    current = str(current).strip()
    target_version = parse_version(target)

    if satisfies(target, current):
        return current

    target_text = _strip_v(target)
    if current.startswith('~'):
        if len(current[1:].split('.')) == 3:
            return f"~{target_text}"
        return f"~{target_version.major}.{target_version.minor}"
    return f"^{target_text}"
