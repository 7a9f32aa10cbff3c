import threading
from datetime import date, timedelta
from decimal import Decimal

import pytest
from conftest import T0, seed_wallet

from zerthyx.core.config import get_settings
from zerthyx.core.errors import (
    ConcurrencyConflict,
    DailyLimitExceeded,
    InsufficientBalance,
    InvalidAmount,
    InvalidTransition,
    LedgerValidationError,
    NotFound,
)
from zerthyx.models import Wallet, WalletLedger, LedgerCategory, LedgerType, RequestStatus
from zerthyx.services.ledger import commit_unit
from zerthyx.services.withdrawals import (
    approve_withdrawal,
    ledger_today,
    list_withdrawals,
    reject_withdrawal,
    request_withdrawal,
)

ADDRESS = "TXyz1234567890"


def _wallet(db, user_id):
    return db.query(Wallet).filter(Wallet.user_id == user_id).one()


@pytest.mark.parametrize("amount", ["9", "9.99999999", "5001"])
def test_amount_outside_limits_is_rejected(db, investor, amount):
    seed_wallet(db, investor.id, total_profit="10000", checkpoint=T0)
    with pytest.raises(InvalidAmount) as exc:
        request_withdrawal(db, investor.id, amount, ADDRESS, "TRC20", now=T0)
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "INVALID_AMOUNT"


def test_valid_request_is_pending_and_stamps_the_day(db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)

    withdrawal = request_withdrawal(db, investor.id, "50", ADDRESS, "trc20", now=T0)

    assert withdrawal.status == RequestStatus.PENDING
    assert withdrawal.blockchain == "TRC20"
    assert withdrawal.amount == Decimal("50")
    wallet = _wallet(db, investor.id)
    assert wallet.last_withdrawal_date == date(2026, 1, 1)
    # Nothing is debited until an administrator approves.
    assert wallet.total_profit == Decimal("100")


def test_request_counts_unflushed_earnings_as_available(db, investor):
    seed_wallet(db, investor.id, total_deposit="1000", checkpoint=T0)
    with pytest.raises(InsufficientBalance):
        request_withdrawal(db, investor.id, "10", ADDRESS, "TRC20", now=T0)

    withdrawal = request_withdrawal(db, investor.id, "10", ADDRESS, "TRC20", now=T0 + timedelta(days=1))
    assert withdrawal.status == RequestStatus.PENDING


def test_insufficient_balance_does_not_stamp_the_day(db, investor):
    seed_wallet(db, investor.id, total_profit="20", checkpoint=T0)

    with pytest.raises(InsufficientBalance):
        request_withdrawal(db, investor.id, "25", ADDRESS, "TRC20", now=T0)

    assert _wallet(db, investor.id).last_withdrawal_date is None
    assert request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0).id


def test_blank_address_and_unknown_chain_are_rejected(db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)
    with pytest.raises(LedgerValidationError):
        request_withdrawal(db, investor.id, "20", "   ", "TRC20", now=T0)
    with pytest.raises(LedgerValidationError) as exc:
        request_withdrawal(db, investor.id, "20", ADDRESS, "ERC20", now=T0)
    assert "TRC20" in exc.value.detail["hint"]


def test_second_request_on_the_same_day_hits_the_daily_limit(db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)
    request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0)

    with pytest.raises(DailyLimitExceeded) as exc:
        request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0 + timedelta(hours=23))
    assert exc.value.status_code == 429

    tomorrow = request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0 + timedelta(days=1))
    assert tomorrow.status == RequestStatus.PENDING
    assert len(list_withdrawals(db, user_id=investor.id)) == 2


def test_ledger_day_follows_configured_timezone(monkeypatch):
    late_evening = T0 + timedelta(hours=20)
    assert ledger_today(late_evening) == date(2026, 1, 1)
    monkeypatch.setattr(get_settings(), "ledger_timezone", "Asia/Tokyo")
    assert ledger_today(late_evening) == date(2026, 1, 2)


def test_approval_flushes_earnings_then_debits(db, investor):
    seed_wallet(db, investor.id, daily_earnings="10", total_profit="15", checkpoint=T0, is_active=False)
    withdrawal = request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0)

    approved = approve_withdrawal(db, withdrawal.id, now=T0)

    assert approved.status == RequestStatus.APPROVED
    assert approved.approved_at is not None
    wallet = _wallet(db, investor.id)
    assert wallet.total_profit == Decimal("5")
    assert wallet.daily_earnings == Decimal("0")
    debit = db.query(WalletLedger).filter(WalletLedger.category == LedgerCategory.WITHDRAWAL).one()
    assert debit.entry_type == LedgerType.DEBIT
    assert debit.amount == Decimal("20")
    assert debit.reference == f"WDR_{withdrawal.id}"


def test_second_approval_beyond_balance_is_refused(db, investor):
    seed_wallet(db, investor.id, total_profit="30", checkpoint=T0, is_active=False)
    first = request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0)
    second = request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0 + timedelta(days=1))

    approve_withdrawal(db, first.id, now=T0 + timedelta(days=1))
    with pytest.raises(InsufficientBalance):
        approve_withdrawal(db, second.id, now=T0 + timedelta(days=1))

    assert _wallet(db, investor.id).total_profit == Decimal("10")
    pending = list_withdrawals(db, user_id=investor.id, status=RequestStatus.PENDING)
    assert [w.id for w in pending] == [second.id]


def test_stale_wallet_write_is_a_concurrency_conflict(session_factory, investor, db):
    seed_wallet(db, investor.id, total_profit="30", checkpoint=T0)
    first = session_factory()
    second = session_factory()
    try:
        wallet_a = _wallet(first, investor.id)
        wallet_b = _wallet(second, investor.id)

        wallet_a.total_profit = Decimal("10")
        commit_unit(first)

        wallet_b.total_profit = Decimal("20")
        with pytest.raises(ConcurrencyConflict) as exc:
            commit_unit(second)
        assert exc.value.status_code == 409
    finally:
        first.close()
        second.close()

    db.expire_all()
    assert _wallet(db, investor.id).total_profit == Decimal("10")


def test_reject_leaves_balances_unchanged(db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)
    withdrawal = request_withdrawal(db, investor.id, "50", ADDRESS, "TRC20", now=T0)

    rejected = reject_withdrawal(db, withdrawal.id, now=T0)

    assert rejected.status == RequestStatus.REJECTED
    assert rejected.rejected_at is not None
    assert _wallet(db, investor.id).total_profit == Decimal("100")
    assert db.query(WalletLedger).count() == 0


def test_reviewing_twice_is_an_invalid_transition(db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)
    withdrawal = request_withdrawal(db, investor.id, "50", ADDRESS, "TRC20", now=T0)
    approve_withdrawal(db, withdrawal.id, now=T0)

    with pytest.raises(InvalidTransition):
        approve_withdrawal(db, withdrawal.id, now=T0)
    with pytest.raises(InvalidTransition):
        reject_withdrawal(db, withdrawal.id, now=T0)
    assert _wallet(db, investor.id).total_profit == Decimal("50")


def test_unknown_withdrawal_is_not_found(db):
    with pytest.raises(NotFound):
        approve_withdrawal(db, 999, now=T0)
    with pytest.raises(NotFound):
        reject_withdrawal(db, 999, now=T0)


def test_daily_stamp_is_checked_against_the_stored_row(session_factory, investor, db):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0)
    first = session_factory()
    second = session_factory()
    try:
        # Both sessions have read the wallet before either stamps the day.
        assert _wallet(first, investor.id).last_withdrawal_date is None
        assert _wallet(second, investor.id).last_withdrawal_date is None

        request_withdrawal(first, investor.id, "20", ADDRESS, "TRC20", now=T0)
        with pytest.raises(DailyLimitExceeded):
            request_withdrawal(second, investor.id, "20", ADDRESS, "TRC20", now=T0 + timedelta(minutes=1))
    finally:
        first.close()
        second.close()

    db.expire_all()
    assert len(list_withdrawals(db, user_id=investor.id)) == 1


def test_parallel_approvals_never_lose_a_debit(session_factory, investor, db):
    seed_wallet(db, investor.id, total_profit="30", checkpoint=T0, is_active=False)
    ids = [
        request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0).id,
        request_withdrawal(db, investor.id, "20", ADDRESS, "TRC20", now=T0 + timedelta(days=1)).id,
    ]
    barrier = threading.Barrier(len(ids))
    outcomes = []
    lock = threading.Lock()

    def _approve(withdrawal_id):
        session = session_factory()
        try:
            barrier.wait()
            approve_withdrawal(session, withdrawal_id, now=T0 + timedelta(days=1))
            outcome = "approved"
        except (ConcurrencyConflict, InsufficientBalance) as exc:
            outcome = type(exc).__name__
        finally:
            session.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_approve, args=(withdrawal_id,)) for withdrawal_id in ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(outcomes) == 2
    assert outcomes.count("approved") == 1
    assert set(outcomes) - {"approved"} <= {"ConcurrencyConflict", "InsufficientBalance"}
    db.expire_all()
    assert _wallet(db, investor.id).total_profit == Decimal("10")
    assert len(list_withdrawals(db, user_id=investor.id, status=RequestStatus.APPROVED)) == 1
    assert db.query(WalletLedger).filter(WalletLedger.category == LedgerCategory.WITHDRAWAL).count() == 1
