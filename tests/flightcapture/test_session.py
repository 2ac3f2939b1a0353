"""
Tests for flightcapture.session — capture channel and session summary.
"""

from fakes import make_capture
from flightcapture.schema import FailedRequestRecord
from flightcapture.session import CaptureChannel, SearchSession


class TestCaptureChannel:
    def test_append_returns_count(self):
        channel = CaptureChannel()
        assert channel.append(make_capture(size=1)) == 1
        assert channel.append(make_capture(size=2)) == 2
        assert len(channel) == 2

    def test_arrival_order(self):
        channel = CaptureChannel()
        for size in (30, 10, 20):
            channel.append(make_capture(size=size))
        assert [c.size for c in channel] == [30, 10, 20]
        assert channel[0].size == 30

    def test_snapshot_unaffected_by_later_appends(self):
        channel = CaptureChannel()
        channel.append(make_capture(size=1))
        snap = channel.snapshot()
        channel.append(make_capture(size=2))
        assert len(snap) == 1
        assert len(channel) == 2

    def test_total_size(self):
        channel = CaptureChannel()
        channel.append(make_capture(size=1024))
        channel.append(make_capture(size=2048))
        assert channel.total_size == 3072


class TestSearchSession:
    def test_empty_summary(self):
        summary = SearchSession().summary()
        assert summary == {
            "total_responses": 0,
            "total_data_size": 0,
            "response_urls": [],
            "timestamps": [],
            "failed_requests": [],
            "failed_request_count": 0,
        }

    def test_summary_counts(self):
        session = SearchSession(url="u")
        session.record_capture(make_capture(url="a", size=10, timestamp="t1"))
        session.record_capture(make_capture(url="b", size=5, timestamp="t2"))
        session.record_failure(FailedRequestRecord(url="c", error="net::ERR_FAILED", timestamp="t3"))

        summary = session.summary()
        assert session.capture_count == 2
        assert summary["total_responses"] == 2
        assert summary["total_data_size"] == 15
        assert summary["response_urls"] == ["a", "b"]
        assert summary["timestamps"] == ["t1", "t2"]
        assert summary["failed_request_count"] == 1
        assert summary["failed_requests"][0] == {"url": "c", "error": "net::ERR_FAILED", "timestamp": "t3"}
