# streamdatum/core/sources.py
from __future__ import annotations

import re
from typing import Iterable

_SPECIAL_RE = re.compile(r"([!$()+.:<=>\[\]^{|}-])")
_SINGLE_STAR_RE = re.compile(r"(?<!\*)\*(?!\*)")


def wildcard_pattern_to_regex(pattern: str | None) -> re.Pattern[str] | None:
    """
    Compile an Ant-style source ID pattern.

    - `?` matches one character other than `/`
    - `*` matches zero or more characters other than `/`
    - `**` matches anything, including `/`; `/**/` also matches a single `/`

    Examples
    --------
    "/power/*"   matches "/power/1", not "/power/1/a"
    "/power/**"  matches "/power/1/a"
    """
    if not pattern:
        return None
    regex = _SPECIAL_RE.sub(r"\\\1", pattern)
    regex = regex.replace("?", "[^/]")
    regex = _SINGLE_STAR_RE.sub("[^/]*", regex)
    regex = regex.replace("**", ".*")
    regex = regex.replace("/.*/", "(/|/.*/)")
    return re.compile(f"^{regex}$")


def filter_source_ids(source_ids: Iterable[str], pattern: str | None) -> list[str]:
    """Source IDs matching `pattern`, in input order. An empty pattern matches everything."""
    regex = wildcard_pattern_to_regex(pattern)
    if regex is None:
        return list(source_ids)
    return [s for s in source_ids if regex.match(s)]
