"""Shared fixtures. All HTTP traffic goes through ``responses``; nothing hits the network."""

from __future__ import annotations

import pytest
import responses

BASE = "http://example.com"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def add_page(rsps: responses.RequestsMock, url: str, body: str, status: int = 200) -> None:
    rsps.add(responses.GET, url, body=body, status=status, content_type="text/html; charset=utf-8")


def add_image(rsps: responses.RequestsMock, url: str, status: int = 200) -> None:
    rsps.add(responses.GET, url, body=b"\x89PNG", status=status, content_type="image/png")


def html(body: str) -> str:
    return f"<!DOCTYPE html><html><head><title>t</title></head><body>{body}</body></html>"
