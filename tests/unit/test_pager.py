"""Tests for the lazy list pager."""

import logging

import pytest

from billing_client_core.errors import ErrorKind, NotFoundError
from billing_client_core.pager import Pager
from billing_client_core.request import RequestDescriptor
from billing_client_core.testing import ScriptedTransport, error_response, json_response, list_response, make_config
from billing_client_core.transport.executor import TransportExecutor

ACCOUNTS = "/sites/subdomain-test/accounts"


def records(prefix, count):
    return [{"id": f"{prefix}-{n}"} for n in range(count)]


def make_pager(*steps, clock, query=None, config=None):
    transport = ScriptedTransport(*steps)
    executor = TransportExecutor(config or make_config(), transport=transport, clock=clock, sleep=clock.sleep)
    return Pager(executor, RequestDescriptor.get(ACCOUNTS, query)), transport


class TestAdvance:
    """Test page-by-page fetching with advance()."""

    @pytest.mark.unit
    def test_single_page_without_next(self, clock):
        """Test that a page without next metadata is the last one."""
        pager, transport = make_pager(list_response(records("a", 3)), clock=clock, query={"ids": "a-0,a-1,a-2"})

        result = pager.advance()

        assert result.value == records("a", 3)
        assert pager.exhausted
        assert transport.call_count == 1

    @pytest.mark.unit
    def test_no_requests_after_exhaustion(self, clock):
        """Test that an exhausted pager reports the end without touching the network."""
        pager, transport = make_pager(list_response([]), clock=clock)

        assert pager.advance().value == []
        for _ in range(3):
            result = pager.advance()
            assert result.ok
            assert result.value is None

        assert transport.call_count == 1
        assert list(pager) == []

    @pytest.mark.unit
    def test_failure_is_terminal(self, clock):
        """Test that a failed page fetch ends iteration and later calls return the same failure."""
        pager, transport = make_pager(
            list_response(records("a", 2), next=f"{ACCOUNTS}?cursor=p2"),
            error_response(404, type="not_found", message="Couldn't find page"),
            clock=clock,
        )

        assert pager.advance().ok
        failure = pager.advance()
        again = pager.advance()

        assert failure.error.kind is ErrorKind.NOT_FOUND
        assert again.error is failure.error
        assert pager.failed
        assert not pager.exhausted
        assert transport.call_count == 2


class TestNextPage:
    """Test how the next page request is built."""

    @pytest.mark.unit
    def test_bare_cursor_is_sent_with_initial_query(self, clock):
        """Test that a cursor token is added to the initial request's query."""
        pager, transport = make_pager(
            json_response(data={"object": "list", "has_more": True, "next": "c2", "data": records("a", 1)}),
            json_response(data={"object": "list", "has_more": False, "next": None, "data": records("b", 1)}),
            clock=clock,
            query={"limit": "1", "sort": "updated_at"},
        )

        assert list(pager) == records("a", 1) + records("b", 1)

        second = transport.requests[1].url.params
        assert second["cursor"] == "c2"
        assert second["limit"] == "1"
        assert second["sort"] == "updated_at"

    @pytest.mark.unit
    def test_link_header_next(self, clock):
        """Test that a Link rel=next header drives pagination when the body has no next."""
        link = f'<https://api.billing.test{ACCOUNTS}?cursor=c2>; rel="next"'
        pager, transport = make_pager(
            json_response(data={"object": "list", "data": records("a", 1)}, headers={"Link": link}),
            json_response(data={"object": "list", "data": records("b", 1)}),
            clock=clock,
        )

        assert list(pager.pages()) == [records("a", 1), records("b", 1)]
        assert transport.requests[1].url.path == ACCOUNTS
        assert transport.requests[1].url.params["cursor"] == "c2"

    @pytest.mark.unit
    def test_absolute_next_under_prefixed_base_url(self, clock):
        """Test that a next URL carrying the base URL's path prefix is not prefixed twice."""
        config = make_config(base_url="https://api.billing.test/v2")
        pager, transport = make_pager(
            list_response(records("a", 1), next=f"https://api.billing.test/v2{ACCOUNTS}?cursor=c2"),
            list_response(records("b", 1)),
            clock=clock,
            config=config,
        )

        assert list(pager) == records("a", 1) + records("b", 1)
        assert [str(request.url) for request in transport.requests] == [
            f"https://api.billing.test/v2{ACCOUNTS}",
            f"https://api.billing.test/v2{ACCOUNTS}?cursor=c2",
        ]

    @pytest.mark.unit
    def test_repeated_next_stops_iteration(self, clock, caplog):
        """Test that the same next page twice in a row ends iteration with a warning."""
        next_url = f"{ACCOUNTS}?cursor=c2"
        pager, transport = make_pager(
            list_response(records("a", 1), next=next_url),
            list_response(records("b", 1), next=next_url),
            clock=clock,
        )

        with caplog.at_level(logging.WARNING, logger="billing_client_core.pager"):
            collected = list(pager)

        assert collected == records("a", 1) + records("b", 1)
        assert transport.call_count == 2
        assert pager.exhausted
        assert "same next page" in caplog.text


class TestIteration:
    """Test the record iterator."""

    @pytest.mark.unit
    def test_iterates_across_pages(self, clock):
        """Test that pages of 200, 200 and 47 yield 447 records in three requests."""
        pager, transport = make_pager(
            list_response(records("a", 200), next=f"{ACCOUNTS}?cursor=p2&limit=200"),
            list_response(records("b", 200), next=f"{ACCOUNTS}?cursor=p3&limit=200"),
            list_response(records("c", 47)),
            clock=clock,
            query={"limit": "200"},
        )

        collected = list(pager)

        assert len(collected) == 447
        assert collected[0] == {"id": "a-0"}
        assert collected[-1] == {"id": "c-46"}
        assert transport.call_count == 3
        assert pager.requests_issued == 3
        assert pager.exhausted
        assert transport.requests[1].url.params["cursor"] == "p2"
        assert transport.requests[2].url.params["cursor"] == "p3"

    @pytest.mark.unit
    def test_is_lazy(self, clock):
        """Test that no request is made until the first record is asked for."""
        pager, transport = make_pager(list_response(records("a", 2)), clock=clock)

        assert transport.call_count == 0
        next(pager)
        assert transport.call_count == 1

    @pytest.mark.unit
    def test_iteration_raises_mapped_exception(self, clock):
        """Test that iterating raises the exception for the failure after yielding earlier records."""
        pager, _ = make_pager(
            list_response(records("a", 2), next=f"{ACCOUNTS}?cursor=p2"),
            error_response(404),
            clock=clock,
        )
        seen = []

        with pytest.raises(NotFoundError):
            for record in pager:
                seen.append(record)

        assert seen == records("a", 2)
        assert pager.error.http_status == 404


class TestFirst:
    """Test fetching just the first record."""

    @pytest.mark.unit
    def test_uses_limit_one(self, clock):
        """Test that first() fetches a single record with limit=1."""
        pager, transport = make_pager(
            list_response(records("a", 1), next=f"{ACCOUNTS}?cursor=p2"), clock=clock, query={"limit": "200"}
        )

        result = pager.first()

        assert result.value == {"id": "a-0"}
        assert transport.requests[0].url.params["limit"] == "1"
        assert pager.requests_issued == 0

    @pytest.mark.unit
    def test_empty_list(self, clock):
        """Test that first() on an empty collection is a success holding None."""
        pager, _ = make_pager(list_response([]), clock=clock)

        result = pager.first()

        assert result.ok
        assert result.value is None

    @pytest.mark.unit
    def test_propagates_failure(self, clock):
        """Test that first() returns the failure instead of raising."""
        pager, _ = make_pager(error_response(401), clock=clock)

        assert pager.first().error.kind is ErrorKind.AUTHORIZATION
