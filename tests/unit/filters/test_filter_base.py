from unittest.mock import MagicMock

from rmq_dump.filters.base import MessageFilter, FilterChain, FilterLike
from rmq_dump.filters.factory import FilterFactory


class TestFilterChain:
    """Test suite for the FilterChain class."""

    def test_empty_chain_accepts_everything(self):
        """Test that an empty filter chain accepts any body."""
        chain = FilterChain()

        assert chain.accepts(b"anything") is True
        assert chain.accepts(b"") is True

    def test_add_filter_returns_extended_chain(self):
        """Test that add_filter returns a new chain with the filter appended."""
        chain = FilterChain()
        mock_filter = MagicMock(spec=MessageFilter)

        extended = chain.add_filter(mock_filter)

        assert len(chain) == 0
        assert len(extended) == 1
        assert extended.filters[0] == mock_filter

    def test_accepts_when_all_filters_accept(self):
        """Test that every filter is consulted, in order, when all accept."""
        calls = []

        filter1 = MagicMock(spec=MessageFilter)
        filter1.accepts.side_effect = lambda body: calls.append("first") or True
        filter2 = MagicMock(spec=MessageFilter)
        filter2.accepts.side_effect = lambda body: calls.append("second") or True

        chain = FilterChain([filter1, filter2])

        assert chain.accepts(b"body") is True
        assert calls == ["first", "second"]
        filter1.accepts.assert_called_once_with(b"body")
        filter2.accepts.assert_called_once_with(b"body")

    def test_first_rejection_short_circuits(self):
        """Test that filters after the first rejecting one are not evaluated."""
        filter1 = MagicMock(spec=MessageFilter)
        filter1.accepts.return_value = False
        filter2 = MagicMock(spec=MessageFilter)
        filter2.accepts.return_value = True

        chain = FilterChain([filter1, filter2])

        assert chain.accepts(b"body") is False
        filter2.accepts.assert_not_called()

    def test_chain_with_non_messagefilter_objects(self):
        """Test that FilterChain works with objects that implement accepts but aren't MessageFilter."""

        class StartsWithBrace:
            def accepts(self, body):
                return body.startswith(b"{")

        chain = FilterChain([StartsWithBrace()])

        assert chain.accepts(b'{"a": 1}') is True
        assert chain.accepts(b"plain") is False


class TestFilterFactory:
    """Test suite for the FilterFactory class."""

    def test_create_filter_chain_with_messagefilters(self):
        """Test that create_filter_chain works with MessageFilter objects."""

        class RejectEmpty(MessageFilter):
            def accepts(self, body):
                return len(body) > 0

        filters = [RejectEmpty(), RejectEmpty()]

        chain = FilterFactory.create_filter_chain(filters)

        assert isinstance(chain, FilterChain)
        assert list(chain.filters) == filters
        assert chain.accepts(b"x") is True
        assert chain.accepts(b"") is False

    def test_create_filter_chain_with_mocks(self):
        """Test that create_filter_chain works with mock objects that have an accepts method."""
        mock_filter = MagicMock(spec=MessageFilter)
        mock_filter.accepts.return_value = False

        chain = FilterFactory.create_filter_chain([mock_filter])

        assert chain.accepts(b"body") is False


class TestFilterLikeProtocol:
    """Tests to verify FilterLike Protocol compatibility."""

    def test_messagefilter_is_filterlike(self):
        """Test that MessageFilter implementations satisfy the FilterLike Protocol."""

        class ConcreteFilter(MessageFilter):
            def accepts(self, body):
                return True

        def accepts_filterlike(f: FilterLike) -> bool:
            return f.accepts(b"")

        assert accepts_filterlike(ConcreteFilter())

    def test_decode_replaces_invalid_utf8(self):
        """Test that undecodable bytes do not raise when filters decode a body."""
        assert MessageFilter.decode(b"ok \xff") == "ok \ufffd"
