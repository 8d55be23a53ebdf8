"""
Site crawler that verifies every referenced image loads.
Exits non-zero when any image is broken, for use as a CI gate.
"""
from image_verifier.extractor import extract
from image_verifier.fetcher import Fetcher, FetchResult
from image_verifier.report import CrawlReport, ImageCheck
from image_verifier.scheduler import CrawlScheduler
from image_verifier.verifier import Verifier

__version__ = "1.0.0"
__all__ = [
    "CrawlReport",
    "CrawlScheduler",
    "Fetcher",
    "FetchResult",
    "ImageCheck",
    "Verifier",
    "extract",
]
