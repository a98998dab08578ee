"""
Skill token normalization and loose skill matching.

A single rule is used everywhere skills are compared (job listing, quiz
matching) and everywhere free text skills are accepted (job post/update,
query strings, quiz selections).
"""

import json
import re
from typing import Any, Dict, Iterable, List, Set

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_token(token: Any) -> str:
    """Lowercase and drop everything outside ``[a-z0-9]``.

    "C++" and "C" both become "c"; a ``+`` preserving variant is not used.
    Non-string input yields an empty string.
    """
    if not isinstance(token, str):
        return ""
    return _NON_ALNUM.sub("", token.lower())


def normalized_set(tokens: Iterable[Any]) -> Set[str]:
    if not tokens:
        return set()
    return {n for n in (normalize_token(t) for t in tokens) if n}


def split_skills(raw: Any) -> List[str]:
    """Turn a skills payload into a clean list of trimmed display strings.

    Accepts a list, a JSON encoded list, or a comma separated string.
    Empties and repeated entries are dropped, first occurrence order kept.
    """
    if not raw:
        return []

    if isinstance(raw, str):
        text = raw.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except ValueError:
                decoded = None
            if isinstance(decoded, list):
                return split_skills(decoded)
        items = text.split(",")
    elif isinstance(raw, (list, tuple, set)):
        items = [str(s) if s is not None else "" for s in raw]
    else:
        return []

    seen = set()
    skills = []
    for item in items:
        skill = item.strip()
        if skill and skill not in seen:
            seen.add(skill)
            skills.append(skill)
    return skills


def matches(requested: Iterable[Any], candidate: Iterable[Any]) -> bool:
    """True when any normalized requested token contains, or is contained
    in, any normalized candidate token.

    This is deliberately loose: "react" matches "reactjs" and "java"
    matches "javascript".
    """
    wanted = normalized_set(requested)
    offered = normalized_set(candidate)
    return any(r in c or c in r for r in wanted for c in offered)


def filter_matching(requested: Iterable[Any], jobs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the jobs whose ``skills`` match. No requested skills, no jobs."""
    wanted = normalized_set(requested)
    if not wanted:
        return []
    return [job for job in jobs if matches(wanted, job.get("skills") or [])]
