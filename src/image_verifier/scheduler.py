"""
Breadth-first crawl of same-host pages, verifying every image found.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Deque, Iterable, List, Optional, Sequence, Set

from image_verifier.config import DEFAULT_ENTRY_POINTS
from image_verifier.errors import FetchError
from image_verifier.extractor import extract
from image_verifier.fetcher import Fetcher
from image_verifier.report import CrawlReport, ImageCheck
from image_verifier.urls import normalize_url, resolve_url
from image_verifier.verifier import Verifier

logger = logging.getLogger(__name__)


class CrawlScheduler:
    """
    Owns the frontier and the two dedup sets for one run.

    ``visited`` and ``pending`` are disjoint: a page is pending while it sits
    in the frontier and moves to visited when claimed. ``checked`` holds every
    image handed to the verifier. All check-and-mark steps hold ``_lock``.
    """

    def __init__(
        self,
        base_url: str,
        fetcher: Optional[Fetcher] = None,
        verifier: Optional[Verifier] = None,
        entry_points: Sequence[str] = DEFAULT_ENTRY_POINTS,
        workers: int = 1,
    ) -> None:
        normalized = normalize_url(base_url.strip()) if base_url else None
        if not normalized:
            raise ValueError(f"Invalid base URL: {base_url}")

        self.base_url = normalized
        self.fetcher = fetcher or Fetcher()
        self.verifier = verifier or Verifier(self.fetcher)
        self.entry_points = list(entry_points)
        self.workers = max(1, workers)

        self.frontier: Deque[str] = deque()
        self.pending: Set[str] = set()
        self.visited: Set[str] = set()
        self.checked: Set[str] = set()
        self._lock = threading.Lock()

        self.report = CrawlReport(base_url=self.base_url)

    def default_seeds(self) -> List[str]:
        """The base URL followed by the well-known entry points."""
        seeds = [self.base_url]
        for path in self.entry_points:
            url = resolve_url(path, self.base_url)
            if url:
                seeds.append(url)
        return seeds

    def enqueue(self, url: str) -> bool:
        """Add a page to the frontier unless it is visited or already pending."""
        with self._lock:
            if url in self.visited or url in self.pending:
                return False
            self.pending.add(url)
            self.frontier.append(url)
            return True

    def seed(self, urls: Iterable[str]) -> int:
        return sum(1 for url in urls if self.enqueue(url))

    def next_page(self) -> Optional[str]:
        """Pop the next page in FIFO order, or None when the frontier is empty."""
        with self._lock:
            if not self.frontier:
                return None
            url = self.frontier.popleft()
            self.pending.discard(url)
            return url

    def claim_page(self, url: str) -> bool:
        """Mark a page visited. False if it already was."""
        with self._lock:
            if url in self.visited:
                return False
            self.visited.add(url)
            return True

    def claim_image(self, url: str) -> bool:
        """Mark an image checked. False if another page claimed it first."""
        with self._lock:
            if url in self.checked:
                return False
            self.checked.add(url)
            return True

    def run(self, seeds: Optional[Sequence[str]] = None) -> CrawlReport:
        """
        Crawl until the frontier is empty and return the report.

        Args:
            seeds: Absolute URLs to start from. Defaults to ``default_seeds()``.

        Returns:
            The CrawlReport. If interrupted with Ctrl-C the partial report is
            returned with ``interrupted`` set.
        """
        self.seed(seeds if seeds is not None else self.default_seeds())
        logger.info("Starting crawl from: %s", self.base_url)

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            while True:
                url = self.next_page()
                if url is None:
                    break
                if not self.claim_page(url):
                    continue
                self.report.pages_visited += 1
                self.crawl_page(url, executor)
        except KeyboardInterrupt:
            logger.warning("Interrupted, reporting partial results")
            self.report.interrupted = True
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        return self.report

    def crawl_page(self, url: str, executor: Optional[ThreadPoolExecutor] = None) -> None:
        """Fetch one claimed page, verify its new images and queue its new links."""
        try:
            response = self.fetcher.fetch(url, want_body=True)
        except FetchError as e:
            logger.warning("Error crawling %s: %s", url, e.message)
            self.report.record_page_failure(url, error=e.message)
            return

        if response.status_code != 200:
            logger.warning("Skipping %s (status %s)", url, response.status_code)
            self.report.record_page_failure(url, status_code=response.status_code, error=response.error)
            return

        if not response.is_html:
            logger.debug("Not HTML, skipping extraction: %s (%s)", url, response.content_type)
            return

        logger.info("Crawling: %s", url)
        # Relative references resolve against the post-redirect location
        found = extract(response.body or "", response.url, self.base_url)

        new_images = [image for image in found.images if self.claim_image(image)]
        for check in self._verify(new_images, url, executor):
            self.report.record_check(check)
            if not check.ok:
                logger.info("Broken image %s (%s)", check.url, check.detail)

        new_links = sum(1 for link in found.links if self.enqueue(link))
        logger.debug(
            "%s: %d images (%d new), %d links (%d new)",
            url, len(found.images), len(new_images), len(found.links), new_links,
        )

    def _verify(
        self,
        images: List[str],
        source: str,
        executor: Optional[ThreadPoolExecutor],
    ) -> List[ImageCheck]:
        if executor is None:
            return [self.verifier.check(image, source) for image in images]

        futures: List[Future] = [executor.submit(self.verifier.check, image, source) for image in images]
        return [future.result() for future in futures]
