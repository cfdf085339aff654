"""Tests for transaction enrichment."""

import pytest

from fakes import ADDR_A, ADDR_B, FakeChainClient, raw_tx, tx_hash

from blockdiff.analysis.enricher import enrich_transactions, transaction_from_raw
from blockdiff.helpers.errors import MissingFieldError, ProtocolViolationError
from blockdiff.helpers.rpc_models import RawTransaction


def raw(n: int, sender: str | None = ADDR_A, to: str | None = ADDR_B) -> RawTransaction:
    return RawTransaction.model_validate(raw_tx(n, sender, to, 1000 + n))


class TestTransactionFromRaw:
    """Tests for transaction_from_raw."""

    def test_builds_record(self) -> None:
        """Test fields are parsed and normalized."""
        record = transaction_from_raw(raw(3, ADDR_A.upper().replace("0X", "0x")), 3)

        assert record.hash == tx_hash(3)
        assert record.from_address == ADDR_A
        assert record.to_address == ADDR_B
        assert record.value == 1003
        assert record.gas_used is None

    def test_contract_creation_has_no_recipient(self) -> None:
        """Test a missing `to` is kept as None."""
        assert transaction_from_raw(raw(0, to=None), 0).to_address is None

    def test_missing_from_raises(self) -> None:
        """Test a transaction without a sender raises MissingFieldError."""
        with pytest.raises(MissingFieldError, match="'from'") as exc_info:
            transaction_from_raw(raw(7, sender=None), 7)

        assert "index 7" in exc_info.value.context

    def test_bare_hash_is_protocol_violation(self) -> None:
        """Test a hash-only transaction list is rejected."""
        with pytest.raises(ProtocolViolationError, match="full transaction"):
            transaction_from_raw(tx_hash(0), 0)

    def test_malformed_address_is_protocol_violation(self) -> None:
        """Test an invalid sender address is rejected."""
        with pytest.raises(ProtocolViolationError, match="malformed"):
            transaction_from_raw(raw(0, sender="0x1234"), 0)


class TestEnrichTransactions:
    """Tests for enrich_transactions."""

    @pytest.mark.asyncio
    async def test_gas_used_from_receipts(self) -> None:
        """Test each record gets its receipt's gasUsed."""
        client = FakeChainClient(
            receipts={
                tx_hash(0): {"gasUsed": "0x5208"},
                tx_hash(1): {"gasUsed": "0xc350"},
            }
        )

        records = await enrich_transactions(client, [raw(0), raw(1)])

        assert [r.gas_used for r in records] == [21000, 50000]
        assert len(client.calls_of("receipt")) == 2

    @pytest.mark.asyncio
    async def test_missing_receipt_leaves_gas_empty(self) -> None:
        """Test an unknown receipt or one without gasUsed gives None."""
        client = FakeChainClient(receipts={tx_hash(1): {"status": "0x1"}})

        records = await enrich_transactions(client, [raw(0), raw(1)])

        assert [r.gas_used for r in records] == [None, None]

    @pytest.mark.asyncio
    async def test_order_preserved_when_receipts_finish_out_of_order(self) -> None:
        """Test output order follows input order, not completion order."""
        count = 6
        client = FakeChainClient(
            receipts={tx_hash(i): {"gasUsed": hex(i)} for i in range(count)},
            # Earlier transactions finish last
            delays={tx_hash(i): 0.005 * (count - i) for i in range(count)},
        )

        records = await enrich_transactions(client, [raw(i) for i in range(count)])

        assert [r.hash for r in records] == [tx_hash(i) for i in range(count)]
        assert [r.gas_used for r in records] == list(range(count))

    @pytest.mark.asyncio
    async def test_malformed_transaction_issues_no_receipt_queries(self) -> None:
        """Test validation happens before any receipt is requested."""
        client = FakeChainClient()

        with pytest.raises(MissingFieldError):
            await enrich_transactions(client, [raw(0), raw(1, sender=None)])

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_empty_block(self) -> None:
        """Test no transactions means no queries."""
        client = FakeChainClient()

        assert await enrich_transactions(client, []) == []
        assert client.calls == []
