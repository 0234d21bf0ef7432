# tests/test_join_ledger.py
"""
Tests for the join ledger: at-most-once recording and reversal.
"""
from datetime import timedelta

from core.db import get_db_session_ctx
from invite_system.services.join_ledger import JoinLedger
from models import JoinRecord
from tests.conftest import T0, run_concurrently


class TestRecordJoin:

    def test_first_record_applied(self, session):
        ledger = JoinLedger(session)
        assert ledger.recordJoin("m1", "inv", "code1", T0, True) is True
        session.commit()

        record = ledger.get("m1")
        assert record.inviterID == "inv"
        assert record.inviteCode == "code1"
        assert record.countedReal is True
        assert record.reversed is False

    def test_duplicate_is_noop(self, session):
        ledger = JoinLedger(session)
        assert ledger.recordJoin("m1", "inv", "code1", T0, True) is True
        assert ledger.recordJoin("m1", "other", "code2", T0 + timedelta(hours=1), False) is False
        session.commit()

        assert session.query(JoinRecord).count() == 1
        record = ledger.get("m1")
        assert record.inviterID == "inv"
        assert record.countedReal is True

    def test_nullable_attribution(self, session):
        ledger = JoinLedger(session)
        assert ledger.recordJoin("m1", None, None, T0, False) is True
        assert ledger.get("m1").inviterID is None

    def test_get_missing(self, session):
        assert JoinLedger(session).get("nobody") is None


class TestTryReverse:

    def test_reverses_inside_window(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)

        assert ledger.tryReverse("m1", T0 + timedelta(minutes=59), 1) is True
        assert ledger.get("m1").reversed is True

    def test_only_once(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)

        assert ledger.tryReverse("m1", T0 + timedelta(minutes=10), 1) is True
        assert ledger.tryReverse("m1", T0 + timedelta(minutes=11), 1) is False

    def test_outside_window(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)

        assert ledger.tryReverse("m1", T0 + timedelta(minutes=61), 1) is False
        assert ledger.get("m1").reversed is False

    def test_exactly_at_window_is_not_reversed(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)

        assert ledger.tryReverse("m1", T0 + timedelta(hours=1), 1) is False

    def test_not_counted_join_never_reversed(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, False)

        assert ledger.tryReverse("m1", T0 + timedelta(minutes=1), 1) is False

    def test_disabled_when_min_stay_zero(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)

        assert ledger.tryReverse("m1", T0 + timedelta(minutes=1), 0) is False

    def test_missing_record(self, session):
        assert JoinLedger(session).tryReverse("nobody", T0, 1) is False


class TestCountActive:

    def test_counts_only_real_not_reversed(self, session):
        ledger = JoinLedger(session)
        ledger.recordJoin("m1", "inv", "c", T0, True)
        ledger.recordJoin("m2", "inv", "c", T0, True)
        ledger.recordJoin("m3", "inv", "c", T0, False)
        ledger.recordJoin("m4", "other", "d", T0, True)
        ledger.tryReverse("m2", T0 + timedelta(minutes=5), 1)

        assert ledger.countActiveFor("inv") == 1
        assert ledger.countActiveFor("other") == 1


class TestConcurrentReversal:
    """Racing departures for the same member in separate sessions."""

    def test_exactly_one_reversal_wins(self, file_engine):
        with get_db_session_ctx() as session:
            JoinLedger(session).recordJoin("m1", "inv", "code1", T0, True)

        results = run_concurrently(
            8,
            lambda index, session: JoinLedger(session).tryReverse("m1", T0 + timedelta(minutes=10), 1),
        )

        assert results.count(True) == 1
        with get_db_session_ctx() as session:
            assert JoinLedger(session).countActiveFor("inv") == 0

    def test_parallel_duplicate_records(self, file_engine):
        results = run_concurrently(
            8,
            lambda index, session: JoinLedger(session).recordJoin("m1", "inv", "code1", T0, True),
        )

        assert results.count(True) == 1
        with get_db_session_ctx() as session:
            assert session.query(JoinRecord).count() == 1
