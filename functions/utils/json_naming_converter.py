"""
functions/utils/json_naming_converter.py

WHAT THIS FILE IS FOR
---------------------
The browser client speaks camelCase (fullName, startDate, coverLetter,
rawResponse); the Python side is snake_case. api.py runs every success
result through convert_keys_snake_to_camel() right before it is sent.

PASS-THROUGH CONTAINERS
-----------------------
GitHub repository objects attached to a tailoring request belong to the
GitHub API, not to us, and must come back byte-for-byte:

    {"github_projects": [{"html_url": "...", "stargazers_count": 3}]}
 -> {"githubProjects": [{"html_url": "...", "stargazers_count": 3}]}

Keys named in `preserve_container_keys` (snake or camel spelling) have
their own name converted and their dict or list value copied as is.

Input is never mutated; keys that are already camelCase are left alone.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Optional


def snake_to_camel(s: str) -> str:
    """
    full_name -> fullName

    Underscores at either end survive (_start_date -> _startDate);
    a name made only of underscores is returned unchanged.
    """
    stripped = s.strip("_")
    if "_" not in stripped:
        return s

    head, *rest = [word for word in stripped.split("_") if word]
    camel = head + "".join(word[0].upper() + word[1:] for word in rest)

    prefix = s[: len(s) - len(s.lstrip("_"))]
    suffix = s[len(s.rstrip("_")):]
    return prefix + camel + suffix


def _convert(obj: Any, preserve: FrozenSet[str]) -> Any:
    if isinstance(obj, dict):
        converted = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                converted[key] = value
                continue
            new_key = snake_to_camel(key)
            keep_inner = isinstance(value, (dict, list)) and (key in preserve or new_key in preserve)
            converted[new_key] = value if keep_inner else _convert(value, preserve)
        return converted

    if isinstance(obj, list):
        return [_convert(item, preserve) for item in obj]

    return obj


def convert_keys_snake_to_camel(
    obj: Any,
    *,
    preserve_container_keys: Optional[Iterable[str]] = None,
) -> Any:
    """
    Return a copy of a JSON-like value with snake_case dict keys camelCased.

    Args:
        obj: dict / list / primitive, typically a result's model_dump()
        preserve_container_keys: container names whose value is not descended into
    """
    return _convert(obj, frozenset(preserve_container_keys or ()))
