"""
Image verification: one GET per unique image, no retries.
"""
from __future__ import annotations

import logging

from image_verifier.errors import FetchError
from image_verifier.fetcher import Fetcher
from image_verifier.report import ImageCheck

logger = logging.getLogger(__name__)


class Verifier:
    """Classify image URLs as working (HTTP 200) or broken."""

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    def check(self, image_url: str, source_page: str) -> ImageCheck:
        try:
            result = self.fetcher.fetch(image_url, want_body=False)
        except FetchError as e:
            logger.debug("Image %s failed: %s", image_url, e.message)
            return ImageCheck(url=image_url, source=source_page, error=e.message)

        check = ImageCheck(
            url=image_url,
            source=source_page,
            status_code=result.status_code,
            error=result.error,
        )
        if not check.ok:
            logger.debug("Image %s broken: %s", image_url, check.detail)
        return check
