"""
Module 04 - In-Memory Ledger Unit Tests
Tests for core/ledger/memory.py and core/ledger/snapshot.py
"""
import pytest

from core.ledger.memory import InMemoryLedger
from core.ledger.snapshot import LedgerSnapshot
from core.schemas.addresses import normalize_address
from core.schemas.errors import (
    AlreadyGeneratedException,
    CountMismatchException,
    GenerationNotStartedException,
    InsufficientLedgerBalanceException,
    InvalidGenesisConfigException,
    OutsideCallerWindowException,
    ProofInvalidException,
)
from core.ledger.reader import LedgerReader
from fixtures.common import make_genesis, make_ledger


class TestLifecycle:
    """Tests for funding, starting and block movement."""

    def test_start_requires_full_supply(self, genesis):
        ledger = InMemoryLedger(genesis, token_balance=genesis.total_tokens - 1)

        with pytest.raises(InsufficientLedgerBalanceException):
            ledger.start()
        assert not ledger.started()

    def test_mint_then_start(self, genesis):
        ledger = InMemoryLedger(genesis)
        ledger.mint(genesis.total_tokens)
        ledger.start()

        assert ledger.started()

    def test_mint_negative_rejected(self, genesis):
        with pytest.raises(ValueError):
            InMemoryLedger(genesis).mint(-5)

    def test_defaults_to_genesis_block(self, genesis):
        assert InMemoryLedger(genesis).current_block() == genesis.genesis_block

    def test_advance_and_mine(self, genesis):
        ledger = InMemoryLedger(genesis)
        ledger.advance_to(150)
        ledger.mine(5)

        assert ledger.current_block() == 155

    def test_cannot_move_backwards(self, genesis):
        ledger = InMemoryLedger(genesis, current_block=200)

        with pytest.raises(ValueError):
            ledger.advance_to(199)


class TestGenerate:
    """Tests for single claims."""

    def test_third_party_claim_credits_both(self, tree, ledger, addresses, caller):
        result = ledger.generate(addresses[0], tree.get_proof(addresses[0]), caller)

        assert result.caller_token_amount == 400_000
        assert ledger.balances[normalize_address(addresses[0])] == 600_000
        assert ledger.balances[normalize_address(caller)] == 400_000
        assert ledger.token_balance() == 9_000_000
        assert ledger.generated(addresses[0])

    def test_self_claim(self, tree, ledger, addresses):
        ledger.generate(addresses[0], tree.get_proof(addresses[0]), addresses[0])

        assert ledger.balances[normalize_address(addresses[0])] == 1_000_000

    def test_second_claim_rejected(self, tree, ledger, addresses, caller):
        ledger.generate(addresses[0], tree.get_proof(addresses[0]), caller)

        with pytest.raises(AlreadyGeneratedException):
            ledger.generate(addresses[0], tree.get_proof(addresses[0]), caller)

    def test_not_started(self, tree, genesis, addresses):
        ledger = make_ledger(genesis, started=False, block=240)

        with pytest.raises(GenerationNotStartedException):
            ledger.generate(addresses[0], tree.get_proof(addresses[0]), addresses[0])

    def test_bad_proof(self, tree, ledger, addresses):
        with pytest.raises(ProofInvalidException):
            ledger.generate(addresses[0], tree.get_proof(addresses[1]), addresses[0])

    def test_third_party_before_window(self, tree, genesis, addresses, caller):
        ledger = make_ledger(genesis, block=199)

        with pytest.raises(OutsideCallerWindowException):
            ledger.generate(addresses[0], tree.get_proof(addresses[0]), caller)

    def test_failure_leaves_state_untouched(self, tree, ledger, addresses):
        before = (ledger.token_balance(), dict(ledger.balances))

        with pytest.raises(ProofInvalidException):
            ledger.generate(addresses[0], [b"\x00" * 32], addresses[0])

        assert (ledger.token_balance(), dict(ledger.balances)) == before
        assert not ledger.generated(addresses[0])


class TestMultiGenerate:
    """Tests for batched claims through the batch intermediary."""

    def test_forwards_caller_share(self, tree, ledger, addresses, caller):
        recipients = addresses[:4]

        result = ledger.multi_generate(recipients, tree.get_batch_proofs(recipients), caller)

        assert result.total_caller_amount == 1_600_000
        assert ledger.balances[normalize_address(caller)] == 1_600_000

    def test_empty_batch(self, ledger, caller):
        result = ledger.multi_generate([], b"", caller)

        assert result.is_empty
        assert ledger.token_balance() == 10_000_000

    def test_count_mismatch(self, tree, ledger, addresses, caller):
        with pytest.raises(CountMismatchException):
            ledger.multi_generate(addresses[:2], tree.get_batch_proofs(addresses[:1]), caller)

    def test_before_window(self, tree, genesis, addresses, caller):
        ledger = make_ledger(genesis, block=150)

        with pytest.raises(OutsideCallerWindowException):
            ledger.multi_generate(addresses[:1], tree.get_batch_proofs(addresses[:1]), caller)

    def test_atomic_on_bad_proof(self, tree, ledger, addresses, caller):
        recipients = addresses[:3]
        packed = tree.get_batch_proofs([addresses[0], addresses[1], addresses[7]])

        with pytest.raises(ProofInvalidException):
            ledger.multi_generate(recipients, packed, caller)

        assert not any(ledger.generated(r) for r in recipients)
        assert ledger.token_balance() == 10_000_000
        assert ledger.balances[normalize_address(caller)] == 0

    def test_rerun_skips_generated(self, tree, ledger, addresses, caller):
        recipients = addresses[:3]
        packed = tree.get_batch_proofs(recipients)
        ledger.multi_generate(recipients[:1], tree.get_batch_proofs(recipients[:1]), caller)

        result = ledger.multi_generate(recipients, packed, caller)

        assert len(result.claims) == 2
        assert ledger.token_balance() == 7_000_000


class TestSnapshot:
    """Tests for LedgerSnapshot.capture()."""

    def test_captures_state(self, tree, ledger, addresses):
        ledger.generate(addresses[0], tree.get_proof(addresses[0]), addresses[0])

        snapshot = LedgerSnapshot.capture(ledger, addresses[:2])

        assert snapshot.root == tree.root
        assert snapshot.started
        assert snapshot.current_block == 240
        assert snapshot.ledger_balance == 9_000_000
        assert snapshot.tokens_per_allocation == 1_000_000
        assert snapshot.is_generated(addresses[0])
        assert not snapshot.is_generated(addresses[1])

    def test_snapshot_does_not_follow_ledger(self, tree, ledger, addresses):
        snapshot = LedgerSnapshot.capture(ledger, addresses[:1])
        ledger.generate(addresses[0], tree.get_proof(addresses[0]), addresses[0])

        assert not snapshot.is_generated(addresses[0])

    def test_snapshot_is_frozen(self, ledger):
        snapshot = LedgerSnapshot.capture(ledger)

        with pytest.raises(Exception):
            snapshot.started = False


class TestGenesisFromReader:
    def test_invalid_parameters_raise_structural(self, genesis):
        class BrokenReader(InMemoryLedger):
            def caller_allocation_end_block(self):
                return self.genesis.caller_allocation_start_block

            def genesis_config(self):
                return LedgerReader.genesis_config(self)

        reader = BrokenReader(genesis)

        with pytest.raises(InvalidGenesisConfigException):
            LedgerSnapshot.capture(reader)

    def test_genesis_validation(self, tree):
        with pytest.raises(ValueError):
            make_genesis(tree, start_block=300, end_block=300)
        with pytest.raises(ValueError):
            make_genesis(tree, genesis_block=250, start_block=200)
        with pytest.raises(ValueError):
            make_genesis(tree, total_recipients=0)
