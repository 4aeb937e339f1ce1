"""GitHub repository slug utilities."""

from __future__ import annotations

_URL_PREFIXES = ("https://github.com/", "http://github.com/", "git@github.com:")


def parse_repo_slug(value: str) -> tuple[str, str]:
    """Extract (owner, repo) from ``owner/repo`` or a GitHub URL.

    Handles:
      - owner/repo
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - git@github.com:owner/repo.git

    Raises ValueError if the value cannot be parsed.
    """
    slug = value.strip().rstrip("/")
    for prefix in _URL_PREFIXES:
        if slug.startswith(prefix):
            slug = slug[len(prefix) :]
            break
    if slug.endswith(".git"):
        slug = slug[:-4]

    parts = slug.split("/")
    if len(parts) != 2 or not all(parts) or any(" " in p for p in parts):
        raise ValueError(f"cannot parse GitHub repository: {value!r}")
    return parts[0], parts[1]
