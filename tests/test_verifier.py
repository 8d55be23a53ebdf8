from __future__ import annotations

import requests
import responses

from image_verifier.fetcher import Fetcher
from image_verifier.verifier import Verifier

from conftest import add_image

SOURCE = "http://example.com/docs"


def test_status_200_is_working(mocked):
    add_image(mocked, "http://example.com/logo.png")

    check = Verifier(Fetcher()).check("http://example.com/logo.png", SOURCE)

    assert check.ok
    assert check.outcome == "working"
    assert check.source == SOURCE
    assert check.detail == "200"


def test_non_200_is_broken_with_status(mocked):
    add_image(mocked, "http://example.com/missing.png", status=404)

    check = Verifier(Fetcher()).check("http://example.com/missing.png", SOURCE)

    assert not check.ok
    assert check.outcome == "broken"
    assert check.status_code == 404
    assert check.detail == "404"


def test_other_2xx_is_still_broken(mocked):
    add_image(mocked, "http://example.com/empty.png", status=204)

    assert not Verifier(Fetcher()).check("http://example.com/empty.png", SOURCE).ok


def test_timeout_is_broken_with_message(mocked):
    mocked.add(responses.GET, "http://example.com/slow.png", body=requests.exceptions.ReadTimeout())

    check = Verifier(Fetcher()).check("http://example.com/slow.png", SOURCE)

    assert not check.ok
    assert check.status_code is None
    assert check.error == "Request timeout"
    assert check.detail == "Request timeout"


def test_redirects_followed_to_working_image(mocked):
    mocked.add(responses.GET, "http://example.com/a.png", status=301, headers={"Location": "/b.png"})
    mocked.add(responses.GET, "http://example.com/b.png", status=302, headers={"Location": "/c.png"})
    add_image(mocked, "http://example.com/c.png")

    check = Verifier(Fetcher(max_redirects=5)).check("http://example.com/a.png", SOURCE)

    assert check.ok
    assert check.url == "http://example.com/a.png"


def test_redirect_budget_exhausted_is_broken(mocked):
    mocked.add(responses.GET, "http://example.com/loop.png", status=301, headers={"Location": "/loop.png"})

    check = Verifier(Fetcher(max_redirects=2)).check("http://example.com/loop.png", SOURCE)

    assert not check.ok
    assert check.status_code == 301
    assert check.detail == "301 (Too many redirects)"


def test_no_retry_after_failure(mocked):
    add_image(mocked, "http://example.com/flaky.png", status=503)

    Verifier(Fetcher()).check("http://example.com/flaky.png", SOURCE)

    mocked.assert_call_count("http://example.com/flaky.png", 1)
