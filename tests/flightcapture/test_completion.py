"""
Tests for flightcapture.completion — stabilization, timeout and retrigger.
"""

import pytest

from fakes import FakeElement, FakePage, make_capture
from flightcapture.completion import (
    ERROR_SELECTOR,
    SEARCH_BUTTON_SELECTOR,
    CompletionDetector,
    retrigger_search,
)
from flightcapture.errors import EmptyCaptureError, SearchCancelledError
from flightcapture.schema import FailedRequestRecord
from flightcapture.session import SearchSession
from flightcapture.timing import CancelToken


def _capture_at(clock, session, at_ms, size=100):
    clock.schedule(at_ms, lambda: session.record_capture(make_capture(size=size)))


class TestCompletionDetector:
    @pytest.mark.asyncio
    async def test_stabilizes_three_seconds_after_last_growth(self, clock):
        session = SearchSession(url="u")
        _capture_at(clock, session, 1000)
        _capture_at(clock, session, 2000)

        outcome = await CompletionDetector(session, clock=clock).wait(max_wait_ms=60000)

        assert outcome.stabilized
        assert outcome.captures == 2
        assert outcome.elapsed_ms == 5000
        assert clock.waits == [1000] * 5

    @pytest.mark.asyncio
    async def test_capture_already_present(self, clock):
        session = SearchSession(url="u")
        session.record_capture(make_capture())

        outcome = await CompletionDetector(session, clock=clock).wait()

        assert outcome.stabilized
        assert outcome.elapsed_ms == 3000

    @pytest.mark.asyncio
    async def test_empty_session_raises_at_max_wait(self, clock):
        session = SearchSession(url="u")
        session.record_failure(FailedRequestRecord(
            url="https://www.united.com/api/flight/FetchFlights",
            error="net::ERR_HTTP2_PROTOCOL_ERROR",
            timestamp="t",
        ))

        with pytest.raises(EmptyCaptureError) as exc_info:
            await CompletionDetector(session, clock=clock).wait(max_wait_ms=5000)

        err = exc_info.value
        assert err.elapsed_ms == 5000
        assert err.url == "u"
        assert len(err.failures) == 1
        assert "within 5s" in str(err)
        assert "(1 failed API requests)" in str(err)

    @pytest.mark.asyncio
    async def test_unstable_stream_returns_partial(self, clock):
        session = SearchSession(url="u")
        for at in range(1000, 6000, 1000):
            _capture_at(clock, session, at)

        outcome = await CompletionDetector(session, clock=clock).wait(max_wait_ms=5000)

        assert not outcome.stabilized
        assert outcome.captures == 5
        assert outcome.elapsed_ms == 5000

    @pytest.mark.asyncio
    async def test_retrigger_every_tenth_tick(self, clock):
        session = SearchSession(url="u")
        calls = []

        async def retrigger():
            calls.append(clock.now_ms())

        detector = CompletionDetector(session, clock=clock, retrigger=retrigger)
        with pytest.raises(EmptyCaptureError):
            await detector.wait(max_wait_ms=20000)

        assert calls == [9000, 19000]

    @pytest.mark.asyncio
    async def test_cancellation_stops_polling(self, clock):
        session = SearchSession(url="u")
        token = CancelToken(clock)
        clock.schedule(2500, lambda: token.cancel("user abort"))

        with pytest.raises(SearchCancelledError, match="user abort"):
            await CompletionDetector(session, clock=clock).wait(token=token)
        assert clock.now == 3000


class TestRetriggerSearch:
    @pytest.mark.asyncio
    async def test_clicks_visible_search_button(self, clock):
        button = FakeElement()
        page = FakePage(clock, elements={
            ERROR_SELECTOR: [FakeElement(text=" Something went wrong ")],
            SEARCH_BUTTON_SELECTOR: [button],
        })
        assert await retrigger_search(page, clock) is True
        assert button.clicks == 1
        assert clock.waits == [2000]

    @pytest.mark.asyncio
    async def test_hidden_button_not_clicked(self, clock):
        button = FakeElement(visible=False)
        page = FakePage(clock, elements={SEARCH_BUTTON_SELECTOR: [button]})
        assert await retrigger_search(page, clock) is False
        assert button.clicks == 0
        assert clock.waits == []

    @pytest.mark.asyncio
    async def test_no_button(self, clock):
        page = FakePage(clock)
        assert await retrigger_search(page, clock) is False
        assert clock.waits == []

    @pytest.mark.asyncio
    async def test_click_failure_is_not_raised(self, clock):
        page = FakePage(clock, elements={SEARCH_BUTTON_SELECTOR: [FakeElement(fail_click=True)]})
        assert await retrigger_search(page, clock) is False
