"""Version control integration."""

from __future__ import annotations

from shipmark.vcs.git import GitRepository, normalize_remote_url, parse_log_output

__all__ = ["GitRepository", "normalize_remote_url", "parse_log_output"]
