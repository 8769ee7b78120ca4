"""Semantic version parsing, comparison and bumping.

Versions follow ``MAJOR.MINOR.PATCH`` with an optional prerelease on one of
three channels (``alpha``, ``beta``, ``rc``), an optional prerelease number
and optional build metadata::

    1.2.3
    v2.0.0-rc.1
    1.0.0-beta+build.42

Build metadata is carried through formatting but never takes part in
comparison or bumping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import StrEnum
from functools import total_ordering
from typing import NamedTuple

from shipmark.exceptions import ValidationError

SEMVER_PATTERN = re.compile(
    r"v?(\d+)\.(\d+)\.(\d+)(?:-(alpha|beta|rc)(?:\.(\d+))?)?(?:\+(.+))?",
    re.IGNORECASE,
)


class PrereleaseChannel(StrEnum):
    """Prerelease channels, in ascending order of maturity."""

    ALPHA = "alpha"
    BETA = "beta"
    RC = "rc"

    @property
    def rank(self) -> int:
        return _CHANNEL_RANK[self]


_CHANNEL_RANK = {
    PrereleaseChannel.ALPHA: 1,
    PrereleaseChannel.BETA: 2,
    PrereleaseChannel.RC: 3,
}


class BumpType(StrEnum):
    """Kinds of version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PREMAJOR = "premajor"
    PREMINOR = "preminor"
    PREPATCH = "prepatch"
    PRERELEASE = "prerelease"


@dataclass(frozen=True)
class PreRelease:
    """Prerelease part of a version: a channel and an optional number."""

    channel: PrereleaseChannel
    number: int | None = None

    def __str__(self) -> str:
        if self.number is None:
            return str(self.channel)
        return f"{self.channel}.{self.number}"


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An immutable semantic version.

    A version is either a release (``pre`` is None) or a prerelease. Every
    bump returns a new instance.
    """

    major: int
    minor: int
    patch: int
    pre: PreRelease | None = None
    build: str | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        return parse(text)

    @property
    def prerelease(self) -> PrereleaseChannel | None:
        return self.pre.channel if self.pre else None

    @property
    def prerelease_number(self) -> int | None:
        return self.pre.number if self.pre else None

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    def bump(
        self,
        bump_type: BumpType | str,
        channel: PrereleaseChannel | str = PrereleaseChannel.ALPHA,
    ) -> Version:
        return bump(self, bump_type, channel)

    def format(self, prefix: str = "") -> str:
        return format_version(self, prefix)

    def __str__(self) -> str:
        return format_version(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare(self, other) < 0

    def __hash__(self) -> int:
        number = (self.pre.number or 0) if self.pre else None
        return hash((self.major, self.minor, self.patch, self.prerelease, number))


class BumpOption(NamedTuple):
    """One entry of the bump choice list offered to the user."""

    type: BumpType
    version: str


def parse(text: str) -> Version:
    """Parse a version string.

    Args:
        text: Version string, optionally prefixed with ``v``

    Returns:
        Parsed Version

    Raises:
        ValidationError: If the string is not a supported semantic version
    """
    match = SEMVER_PATTERN.fullmatch(text)
    if not match:
        raise ValidationError(
            f"Invalid version format: {text}",
            [
                "Version must follow semver format: MAJOR.MINOR.PATCH",
                "Examples: 1.0.0, 2.1.3, 1.0.0-alpha.1, v1.2.3",
            ],
        )

    major, minor, patch, channel, number, build = match.groups()
    pre = None
    if channel:
        pre = PreRelease(
            channel=PrereleaseChannel(channel.lower()),
            number=int(number) if number is not None else None,
        )

    return Version(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        pre=pre,
        build=build,
    )


def format_version(version: Version, prefix: str = "") -> str:
    """Render a version as a string, with an optional prefix such as ``v``."""
    text = f"{prefix}{version.major}.{version.minor}.{version.patch}"
    if version.pre is not None:
        text += f"-{version.pre}"
    if version.build:
        text += f"+{version.build}"
    return text


def bump(
    version: Version,
    bump_type: BumpType | str,
    channel: PrereleaseChannel | str = PrereleaseChannel.ALPHA,
) -> Version:
    """Return the version that follows ``version`` for the given bump type.

    Plain bumps (major, minor, patch) clear any prerelease. The ``pre*``
    bumps perform the plain bump and start ``channel`` at number 1. A
    ``prerelease`` bump increments the number of an existing prerelease, or
    starts a new one on the next patch version. Build metadata is always
    dropped.

    Raises:
        ValidationError: If the bump type or channel is unknown
    """
    bump_type = _coerce_bump_type(bump_type)
    channel = _coerce_channel(channel)
    start = PreRelease(channel, 1)

    if bump_type == BumpType.MAJOR:
        return Version(version.major + 1, 0, 0)
    if bump_type == BumpType.MINOR:
        return Version(version.major, version.minor + 1, 0)
    if bump_type == BumpType.PATCH:
        return Version(version.major, version.minor, version.patch + 1)
    if bump_type == BumpType.PREMAJOR:
        return Version(version.major + 1, 0, 0, start)
    if bump_type == BumpType.PREMINOR:
        return Version(version.major, version.minor + 1, 0, start)
    if bump_type == BumpType.PREPATCH:
        return Version(version.major, version.minor, version.patch + 1, start)

    # BumpType.PRERELEASE
    if version.pre is not None:
        pre = replace(version.pre, number=(version.pre.number or 0) + 1)
        return Version(version.major, version.minor, version.patch, pre)
    return Version(version.major, version.minor, version.patch + 1, start)


def compare(a: Version, b: Version) -> int:
    """Compare two versions.

    Returns:
        -1 if ``a < b``, 0 if they are equal, 1 if ``a > b``
    """
    left = (a.major, a.minor, a.patch)
    right = (b.major, b.minor, b.patch)
    if left != right:
        return 1 if left > right else -1

    # A release sorts after every prerelease of the same version
    if a.pre is None or b.pre is None:
        if a.pre is b.pre:
            return 0
        return 1 if a.pre is None else -1

    left = (a.pre.channel.rank, a.pre.number or 0)
    right = (b.pre.channel.rank, b.pre.number or 0)
    if left == right:
        return 0
    return 1 if left > right else -1


def is_valid(text: str) -> bool:
    """Check whether ``text`` is a supported version string."""
    return SEMVER_PATTERN.fullmatch(text) is not None


def clean(text: str) -> str:
    """Strip a single leading ``v`` or ``V``."""
    if text[:1] in ("v", "V"):
        return text[1:]
    return text


def get_bump_options(
    version: Version,
    channel: PrereleaseChannel | str = PrereleaseChannel.ALPHA,
) -> list[BumpOption]:
    """List the available bumps for ``version`` with their resulting versions.

    The order is fixed: patch, minor, major, prepatch, preminor, premajor,
    then prerelease when ``version`` is already a prerelease. Callers number
    the entries when presenting them, so the order must not change.
    """
    bump_types = [
        BumpType.PATCH,
        BumpType.MINOR,
        BumpType.MAJOR,
        BumpType.PREPATCH,
        BumpType.PREMINOR,
        BumpType.PREMAJOR,
    ]
    if version.is_prerelease:
        bump_types.append(BumpType.PRERELEASE)

    return [
        BumpOption(bump_type, format_version(bump(version, bump_type, channel)))
        for bump_type in bump_types
    ]


def _coerce_bump_type(value: BumpType | str) -> BumpType:
    try:
        return BumpType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid bump type: {value}",
            [f"Valid types: {', '.join(BumpType)}"],
        ) from None


def _coerce_channel(value: PrereleaseChannel | str) -> PrereleaseChannel:
    try:
        return PrereleaseChannel(str(value).lower())
    except ValueError:
        raise ValidationError(
            f"Invalid prerelease channel: {value}",
            [f"Valid channels: {', '.join(PrereleaseChannel)}"],
        ) from None
