from __future__ import annotations

import io
import json

from image_verifier.report import CrawlReport, ImageCheck, print_report, write_json


def _report() -> CrawlReport:
    report = CrawlReport(base_url="http://example.com/", pages_visited=3)
    report.record_check(ImageCheck("http://example.com/ok.png", "http://example.com/", 200))
    report.record_check(ImageCheck("http://example.com/gone.png", "http://example.com/a", 404))
    report.record_check(ImageCheck("http://example.com/slow.png", "http://example.com/b", error="Request timeout"))
    report.record_page_failure("http://example.com/missing", status_code=404)
    return report


def test_counts_and_verdict():
    report = _report()

    assert report.images_checked == 3
    assert len(report.working) == 1
    assert [c.url for c in report.broken] == ["http://example.com/gone.png", "http://example.com/slow.png"]
    assert not report.passed
    assert report.exit_code == 1


def test_empty_report_passes():
    report = CrawlReport(base_url="http://example.com/")
    assert report.passed
    assert report.exit_code == 0


def test_page_failures_alone_do_not_fail():
    report = CrawlReport(base_url="http://example.com/")
    report.record_page_failure("http://example.com/x", error="Request timeout")
    assert report.passed


def test_interrupted_report_fails():
    report = CrawlReport(base_url="http://example.com/", interrupted=True)
    assert not report.passed
    assert report.exit_code == 1


def test_print_report_lists_broken_images():
    out = io.StringIO()
    print_report(_report(), stream=out)
    text = out.getvalue()

    assert "Pages crawled:   3" in text
    assert "Images checked:  3" in text
    assert "Working images:  1" in text
    assert "Broken images:   2" in text
    assert "Image:    http://example.com/gone.png" in text
    assert "Found on: http://example.com/a" in text
    assert "Status:   404" in text
    assert "Error:    Request timeout" in text
    assert "http://example.com/missing: status 404" in text
    assert "FAILED: 2 broken image(s) found" in text
    assert "PASSED" not in text


def test_print_report_passed():
    report = CrawlReport(base_url="http://example.com/", pages_visited=1)
    report.record_check(ImageCheck("http://example.com/ok.png", "http://example.com/", 200))
    out = io.StringIO()

    print_report(report, stream=out)

    assert "PASSED: all images are working" in out.getvalue()
    assert "Broken images:\n" not in out.getvalue()


def test_write_json(tmp_path):
    path = write_json(_report(), str(tmp_path / "out" / "report.json"))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["passed"] is False
    assert data["broken"] == 2
    assert data["images"][1] == {
        "url": "http://example.com/gone.png",
        "source": "http://example.com/a",
        "status_code": 404,
        "error": None,
        "outcome": "broken",
    }
    assert data["page_failures"] == [{"url": "http://example.com/missing", "status_code": 404, "error": None}]


def test_write_json_to_stdout(capsys):
    assert write_json(CrawlReport(base_url="http://example.com/"), "-") is None
    assert json.loads(capsys.readouterr().out)["passed"] is True
