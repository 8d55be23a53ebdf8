"""Configuration objects and defaults for a verification run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_USER_AGENT = "ImageVerifier/1.0"

# Sections of the site with no inbound links from the home page
DEFAULT_ENTRY_POINTS = (
    "/blog",
    "/docs/architecture",
    "/docs/guide",
    "/docs/community",
    "/videos",
)


@dataclass
class VerifierConfig:
    """Settings that control crawling and image checks."""

    base_url: str = DEFAULT_BASE_URL
    entry_points: List[str] = field(default_factory=lambda: list(DEFAULT_ENTRY_POINTS))
    timeout: float = DEFAULT_TIMEOUT
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    user_agent: str = DEFAULT_USER_AGENT
    workers: int = 1
    json_output: Optional[str] = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must not be negative, got {self.max_redirects}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
