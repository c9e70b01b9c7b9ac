import pytest
from sqlalchemy import update
from sqlmodel import Session, select

from waste_rewards.exceptions import (
    ConcurrentUpdateError,
    InsufficientPointsError,
    InvalidAmountError,
    PreconditionFailedError,
    RewardNotFoundError,
    UserNotFoundError,
)
from waste_rewards.models import RewardOffer, Transaction, TransactionType, User, Wallet
from waste_rewards.services import ledger


def _transactions(session: Session, user_id: int) -> list[Transaction]:
    return session.exec(select(Transaction).where(Transaction.user_id == user_id)).all()


def test_get_or_create_wallet_creates_one_empty_wallet(session: Session, user: User):
    first = ledger.get_or_create_wallet(session, user.id)
    second = ledger.get_or_create_wallet(session, user.id)

    assert first.id == second.id
    assert first.points == 0
    assert first.level == 1
    wallets = session.exec(select(Wallet).where(Wallet.user_id == user.id)).all()
    assert len(wallets) == 1


def test_get_or_create_wallet_unknown_user(session: Session):
    with pytest.raises(UserNotFoundError):
        ledger.get_or_create_wallet(session, 999)


def test_credit_increases_balance_and_logs_transaction(session: Session, user: User):
    wallet = ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report")

    assert wallet.points == 10
    history = ledger.get_transaction_history(session, user.id)
    assert len(history) == 1
    assert history[0].type == "earned_report"
    assert history[0].amount == 10
    assert history[0].description == "report"


def test_credit_accepts_type_as_string(session: Session, user: User):
    ledger.credit(session, user.id, 4, "earned_collect", "collect")
    assert ledger.get_transaction_history(session, user.id)[0].type == "earned_collect"


@pytest.mark.parametrize("amount", [0, -5])
def test_credit_rejects_non_positive_amount(session: Session, user: User, amount: int):
    with pytest.raises(InvalidAmountError):
        ledger.credit(session, user.id, amount, TransactionType.EARNED_REPORT, "report")

    assert ledger.get_balance(session, user.id) == 0
    assert _transactions(session, user.id) == []


def test_credit_rejects_debit_type(session: Session, user: User):
    with pytest.raises(InvalidAmountError):
        ledger.credit(session, user.id, 5, TransactionType.REDEEMED, "sneaky")
    with pytest.raises(InvalidAmountError):
        ledger.credit(session, user.id, 5, "bonus", "unknown type")


def test_credit_without_commit_rolls_back_with_caller(session: Session, user: User):
    ledger.get_or_create_wallet(session, user.id)
    ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report", commit=False)
    session.rollback()

    assert ledger.get_balance(session, user.id) == 0
    assert _transactions(session, user.id) == []


def test_redeem_offer_debits_cost(session: Session, user: User, offer: RewardOffer):
    ledger.credit(session, user.id, 12, TransactionType.EARNED_REPORT, "report")

    wallet = ledger.redeem(session, user.id, offer.id)

    assert wallet.points == 7
    head = ledger.get_transaction_history(session, user.id)[0]
    assert head.type == "redeemed"
    assert head.amount == 5
    assert head.description == "Redeemed: Tote Bag"


def test_redeem_with_insufficient_points_changes_nothing(session: Session, user: User, offer: RewardOffer):
    ledger.credit(session, user.id, 3, TransactionType.EARNED_REPORT, "report")

    with pytest.raises(InsufficientPointsError):
        ledger.redeem(session, user.id, offer.id)

    assert ledger.get_balance(session, user.id) == 3
    assert len(_transactions(session, user.id)) == 1


def test_redeem_unavailable_offer_is_rejected(session: Session, user: User, offer: RewardOffer):
    offer.is_available = False
    session.add(offer)
    session.commit()
    ledger.credit(session, user.id, 50, TransactionType.EARNED_REPORT, "report")

    with pytest.raises(InsufficientPointsError):
        ledger.redeem(session, user.id, offer.id)
    assert ledger.get_balance(session, user.id) == 50


def test_redeem_missing_offer(session: Session, user: User):
    with pytest.raises(RewardNotFoundError):
        ledger.redeem(session, user.id, 42)


def test_redeem_all_logs_balance_held_before_reset(session: Session, user: User):
    ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report")
    ledger.credit(session, user.id, 15, TransactionType.EARNED_COLLECT, "collect")

    wallet = ledger.redeem_all(session, user.id)

    assert wallet.points == 0
    head = ledger.get_transaction_history(session, user.id)[0]
    assert head.type == "redeemed"
    assert head.amount == 25
    assert head.description == "Redeemed all points: 25"


def test_redeem_all_with_empty_wallet_is_rejected(session: Session, user: User):
    with pytest.raises(InsufficientPointsError):
        ledger.redeem_all(session, user.id)
    assert _transactions(session, user.id) == []


def test_balance_never_negative(session: Session, user: User, offer: RewardOffer):
    ledger.credit(session, user.id, 7, TransactionType.EARNED_REPORT, "report")
    ledger.redeem(session, user.id, offer.id)
    for _ in range(3):
        with pytest.raises(InsufficientPointsError):
            ledger.redeem(session, user.id, offer.id)

    assert ledger.get_balance(session, user.id) == 2


def test_every_balance_change_has_one_transaction(session: Session, user: User, offer: RewardOffer):
    ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report")
    ledger.credit(session, user.id, 10, TransactionType.EARNED_COLLECT, "collect")
    ledger.redeem(session, user.id, offer.id)

    rows = _transactions(session, user.id)
    net = sum(t.amount if t.type.is_credit else -t.amount for t in rows)
    assert len(rows) == 3
    assert net == ledger.get_balance(session, user.id) == 15


def test_stale_wallet_write_raises_conflict(session: Session, user: User):
    wallet = ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report")

    # another request commits a balance write this session has not seen
    session.execute(
        update(Wallet)
        .where(Wallet.id == wallet.id)
        .values(version=Wallet.version + 1)
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(ConcurrentUpdateError):
        ledger.credit(session, user.id, 5, TransactionType.EARNED_COLLECT, "collect")

    assert ledger.get_balance(session, user.id) == 10
    assert len(_transactions(session, user.id)) == 1


def test_list_available_rewards_puts_balance_first(session: Session, user: User, collector: User):
    ledger.credit(session, user.id, 30, TransactionType.EARNED_REPORT, "report")
    ledger.credit(session, collector.id, 99, TransactionType.EARNED_REPORT, "report")
    session.add_all([
        RewardOffer(name="Seeds", cost=20),
        RewardOffer(name="Bag", cost=5),
        RewardOffer(name="Retired", cost=1, is_available=False),
    ])
    session.commit()

    listings = ledger.list_available_rewards(session, user.id)

    assert listings[0].kind == "balance"
    assert listings[0].id is None
    assert listings[0].name == "Your Points"
    assert listings[0].cost == 30
    assert [(r.name, r.cost) for r in listings[1:]] == [("Bag", 5), ("Seeds", 20)]
    # other users' balances are never offered as rewards
    assert all(r.cost != 99 for r in listings)


def test_transaction_history_newest_first_with_limit(session: Session, user: User):
    for i in range(1, 13):
        ledger.credit(session, user.id, i, TransactionType.EARNED_REPORT, f"report {i}")

    history = ledger.get_transaction_history(session, user.id)

    assert len(history) == 10
    assert [t.amount for t in history[:3]] == [12, 11, 10]
    assert len(history[0].date) == 10
    assert history[0].date.count("-") == 2
    assert len(ledger.get_transaction_history(session, user.id, limit=3)) == 3
    with pytest.raises(InvalidAmountError):
        ledger.get_transaction_history(session, user.id, limit=0)


def test_create_offer_rejects_non_positive_cost(session: Session):
    with pytest.raises(InvalidAmountError):
        ledger.create_offer(session, "Free lunch", 0)


def test_create_offer_rejects_duplicate_name(session: Session, offer: RewardOffer):
    with pytest.raises(PreconditionFailedError):
        ledger.create_offer(session, offer.name, 20)
    assert len(session.exec(select(RewardOffer)).all()) == 1


def test_report_collect_redeem_scenario(session: Session, user: User):
    expensive = RewardOffer(name="Bike Voucher", cost=15)
    session.add(expensive)
    session.commit()

    assert ledger.get_balance(session, user.id) == 0

    ledger.credit(session, user.id, 10, TransactionType.EARNED_REPORT, "report")
    assert ledger.get_balance(session, user.id) == 10
    history = ledger.get_transaction_history(session, user.id)
    assert [(t.type, t.amount) for t in history] == [("earned_report", 10)]

    with pytest.raises(InsufficientPointsError):
        ledger.redeem(session, user.id, expensive.id)
    assert ledger.get_balance(session, user.id) == 10

    ledger.credit(session, user.id, 10, TransactionType.EARNED_COLLECT, "collect")
    assert ledger.get_balance(session, user.id) == 20

    ledger.redeem_all(session, user.id)
    assert ledger.get_balance(session, user.id) == 0
    head = ledger.get_transaction_history(session, user.id)[0]
    assert (head.type, head.amount) == ("redeemed", 20)
