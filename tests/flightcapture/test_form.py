"""
Tests for flightcapture.form — filling and submitting the landing-page form.
"""

import pytest

from fakes import FakeElement, FakePage
from flightcapture.errors import FormInteractionError, SearchCancelledError
from flightcapture.form import FORM_READY_SELECTOR, FormDriver
from flightcapture.schema import SearchParams
from flightcapture.timing import CancelToken

BASE_URL = "https://www.united.com"

ORIGIN = 'input[placeholder*="From"]'
DESTINATION = 'input[placeholder*="To"]'
DEPART = 'input[placeholder*="Depart"]'
RETURN = 'input[placeholder*="Return"]'
SUBMIT = 'button[type="submit"]'


def _form_page(clock, selectors=(FORM_READY_SELECTOR, ORIGIN, DESTINATION, DEPART, RETURN), **kwargs):
    return FakePage(clock, selectors=selectors, **kwargs)


class TestFill:
    @pytest.mark.asyncio
    async def test_fills_all_fields(self, clock):
        page = _form_page(clock)
        params = SearchParams("PHL", "NYC", "2026-08-15", "2026-08-17")

        await FormDriver(page, BASE_URL, clock=clock).fill(params)

        assert page.typed == [
            (ORIGIN, "PHL", 100),
            (DESTINATION, "NYC", 100),
            (DEPART, "2026-08-15", 100),
            (RETURN, "2026-08-17", 100),
        ]
        assert page.pressed == ["Tab", "Tab", "Control+A", "Tab", "Control+A", "Tab"]
        assert page.clicked == [ORIGIN, DESTINATION, DEPART, RETURN]

    @pytest.mark.asyncio
    async def test_oneway_skips_return(self, clock):
        page = _form_page(clock)
        await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC", "2026-08-15"))
        assert [t[0] for t in page.typed] == [ORIGIN, DESTINATION, DEPART]

    @pytest.mark.asyncio
    async def test_falls_through_to_next_candidate(self, clock):
        page = _form_page(clock, selectors=(FORM_READY_SELECTOR, "#origin", "#destination"))
        await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC"))
        assert page.typed == [("#origin", "PHL", 100), ("#destination", "NYC", 100)]

    @pytest.mark.asyncio
    async def test_keystroke_delay(self, clock):
        page = _form_page(clock)
        await FormDriver(page, BASE_URL, clock=clock, keystroke_delay_ms=50).fill(SearchParams("PHL", "NYC"))
        assert all(delay == 50 for _, _, delay in page.typed)

    @pytest.mark.asyncio
    async def test_form_not_ready(self, clock):
        page = _form_page(clock, selectors=())
        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC"))
        assert exc_info.value.step == "form ready"

    @pytest.mark.asyncio
    async def test_missing_origin_raises(self, clock):
        page = _form_page(clock, selectors=(FORM_READY_SELECTOR, DESTINATION))
        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC"))
        assert exc_info.value.step == "origin"
        assert page.typed == []

    @pytest.mark.asyncio
    async def test_missing_destination_raises(self, clock):
        page = _form_page(clock, selectors=(FORM_READY_SELECTOR, ORIGIN))
        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC"))
        assert exc_info.value.step == "destination"

    @pytest.mark.asyncio
    async def test_missing_date_field_only_warns(self, clock):
        page = _form_page(clock, selectors=(FORM_READY_SELECTOR, ORIGIN, DESTINATION))
        await FormDriver(page, BASE_URL, clock=clock).fill(SearchParams("PHL", "NYC", "2026-08-15", "2026-08-17"))
        assert [t[1] for t in page.typed] == ["PHL", "NYC"]


class TestSubmit:
    @pytest.mark.asyncio
    async def test_clicks_first_submit_control(self, clock):
        button = FakeElement()
        page = _form_page(clock, elements={SUBMIT: [button]})
        used = await FormDriver(page, BASE_URL, clock=clock).submit()
        assert used == SUBMIT
        assert button.clicks == 1
        assert clock.waits == [3000]

    @pytest.mark.asyncio
    async def test_skips_broken_control(self, clock):
        fallback = FakeElement()
        page = _form_page(clock, elements={
            SUBMIT: [FakeElement(fail_click=True)],
            ".search-button": [fallback],
        })
        assert await FormDriver(page, BASE_URL, clock=clock).submit() == ".search-button"
        assert fallback.clicks == 1

    @pytest.mark.asyncio
    async def test_enter_fallback(self, clock):
        page = _form_page(clock)
        assert await FormDriver(page, BASE_URL, clock=clock).submit() == "Enter"
        assert page.pressed == ["Enter"]

    @pytest.mark.asyncio
    async def test_enter_failure_raises(self, clock):
        page = _form_page(clock, fail_keys=("Enter",))
        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).submit()
        assert exc_info.value.step == "submit"


class TestRun:
    @pytest.mark.asyncio
    async def test_opens_landing_page_then_submits(self, clock):
        button = FakeElement()
        page = _form_page(clock, elements={SUBMIT: [button]})

        await FormDriver(page, BASE_URL, clock=clock).run(SearchParams("PHL", "NYC", "2026-08-15"))

        assert page.gotos == [(BASE_URL, "domcontentloaded", 60000)]
        assert clock.waits[0] == 3000
        assert button.clicks == 1

    @pytest.mark.asyncio
    async def test_waits_bounded_by_deadline(self, clock):
        page = _form_page(clock, selectors=())
        token = CancelToken(clock, deadline_ms=4000)

        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).run(SearchParams("PHL", "NYC"), token)

        assert exc_info.value.step == "form ready"
        assert page.gotos[0][2] == 4000
        # settle took 3000 of the 4000 ms budget
        assert page.waited == [(FORM_READY_SELECTOR, 1000)]

    @pytest.mark.asyncio
    async def test_expired_deadline_cancels_before_landing_page(self, clock):
        page = _form_page(clock)
        token = CancelToken(clock, deadline_ms=0)

        with pytest.raises(SearchCancelledError):
            await FormDriver(page, BASE_URL, clock=clock).run(SearchParams("PHL", "NYC"), token)
        assert page.gotos == []

    @pytest.mark.asyncio
    async def test_landing_page_failure(self, clock):
        page = _form_page(clock, goto_failures=1)
        with pytest.raises(FormInteractionError) as exc_info:
            await FormDriver(page, BASE_URL, clock=clock).run(SearchParams("PHL", "NYC"))
        assert exc_info.value.step == "landing page"
        assert "ERR_CONNECTION_RESET" in str(exc_info.value)
