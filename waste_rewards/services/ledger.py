"""
Points ledger: wallet balances and the transaction log that audits them.

Every balance change goes through ``_write_points`` and is paired with exactly
one ``Transaction`` row in the same database transaction. Balance writes are
compare-and-set on ``Wallet.version`` so two requests working from the same
stale balance cannot both succeed.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..exceptions import (
    ConcurrentUpdateError,
    InsufficientPointsError,
    InvalidAmountError,
    PreconditionFailedError,
    RewardNotFoundError,
    UserNotFoundError,
)
from ..models import RewardOffer, Transaction, TransactionType, User, Wallet
from ..schemas.rewards import RewardListing, TransactionEntry
from ..utils import format_date, utcnow

log = logging.getLogger(__name__)

BALANCE_LISTING_NAME = "Your Points"


def _find_wallet(session: Session, user_id: int) -> Optional[Wallet]:
    return session.exec(select(Wallet).where(Wallet.user_id == user_id)).first()


def get_or_create_wallet(session: Session, user_id: int, *, commit: bool = True) -> Wallet:
    """
    Return the user's wallet, creating an empty one on first access.
    With commit=False a new wallet is only flushed and the caller commits.
    """
    wallet = _find_wallet(session, user_id)
    if wallet:
        return wallet

    if session.get(User, user_id) is None:
        raise UserNotFoundError(user_id)

    wallet = Wallet(user_id=user_id, points=0)
    session.add(wallet)
    try:
        session.flush()
    except IntegrityError:
        # unique(user_id): a concurrent request created it first
        session.rollback()
        return session.exec(select(Wallet).where(Wallet.user_id == user_id)).one()

    if commit:
        session.commit()
        session.refresh(wallet)
    log.info("Created wallet for user %s", user_id)
    return wallet


def get_balance(session: Session, user_id: int) -> int:
    return get_or_create_wallet(session, user_id).points


def _write_points(session: Session, wallet: Wallet, points: int) -> None:
    expected = wallet.version
    result = session.execute(
        update(Wallet)
        .where(Wallet.id == wallet.id, Wallet.version == expected)
        .values(points=points, version=expected + 1, updated_at=utcnow())
    )
    if result.rowcount != 1:
        session.rollback()
        log.warning("Wallet %s changed under us (expected version %s)", wallet.id, expected)
        raise ConcurrentUpdateError("Your balance changed while this request was running. Please try again.")


def _append_transaction(
    session: Session,
    user_id: int,
    transaction_type: TransactionType,
    amount: int,
    description: str,
) -> Transaction:
    tx = Transaction(user_id=user_id, type=transaction_type, amount=amount, description=description)
    session.add(tx)
    return tx


def _finish(session: Session, wallet: Wallet, commit: bool) -> Wallet:
    if commit:
        session.commit()
        session.refresh(wallet)
    else:
        session.flush()
    return wallet


def credit(
    session: Session,
    user_id: int,
    amount: int,
    transaction_type: TransactionType | str,
    description: str,
    *,
    commit: bool = True,
) -> Wallet:
    """
    Add ``amount`` points to the user's wallet and log an earned_* transaction.

    If commit=False the caller is responsible for committing, which lets
    callers put their own writes in the same database transaction.
    """
    try:
        transaction_type = TransactionType(transaction_type)
    except ValueError:
        raise InvalidAmountError(f"Unknown transaction type: {transaction_type}") from None
    if not transaction_type.is_credit:
        raise InvalidAmountError(f"{transaction_type.value} is not a credit transaction type")
    if amount <= 0:
        raise InvalidAmountError("Credit amount must be positive")

    wallet = get_or_create_wallet(session, user_id, commit=False)
    _write_points(session, wallet, wallet.points + amount)
    _append_transaction(session, user_id, transaction_type, amount, description)
    _finish(session, wallet, commit)
    log.info("Credited %s points to user %s (%s)", amount, user_id, transaction_type.value)
    return wallet


def redeem(session: Session, user_id: int, offer_id: int) -> Wallet:
    """Exchange points for a catalog offer. Nothing changes if the check fails."""
    offer = session.get(RewardOffer, offer_id)
    if offer is None:
        raise RewardNotFoundError(offer_id)

    wallet = get_or_create_wallet(session, user_id, commit=False)
    if not offer.is_available or wallet.points < offer.cost:
        log.warning(
            "User %s cannot redeem offer %s (balance %s, cost %s, available %s)",
            user_id, offer.id, wallet.points, offer.cost, offer.is_available,
        )
        raise InsufficientPointsError()

    _write_points(session, wallet, wallet.points - offer.cost)
    _append_transaction(session, user_id, TransactionType.REDEEMED, offer.cost, f"Redeemed: {offer.name}")
    _finish(session, wallet, commit=True)
    log.info("User %s redeemed offer %s for %s points", user_id, offer.id, offer.cost)
    return wallet


def redeem_all(session: Session, user_id: int) -> Wallet:
    """Cash out the whole balance, logging the amount held before the reset."""
    wallet = get_or_create_wallet(session, user_id, commit=False)
    balance = wallet.points
    if balance <= 0:
        raise InsufficientPointsError("No points to redeem")

    _write_points(session, wallet, 0)
    _append_transaction(
        session, user_id, TransactionType.REDEEMED, balance, f"Redeemed all points: {balance}"
    )
    _finish(session, wallet, commit=True)
    log.info("User %s redeemed all %s points", user_id, balance)
    return wallet


def list_available_rewards(session: Session, user_id: int) -> list[RewardListing]:
    balance = get_balance(session, user_id)
    listings = [
        RewardListing(
            id=None,
            name=BALANCE_LISTING_NAME,
            cost=balance,
            description="Redeem your earned points",
            collection_info="Points earned from reporting and collecting waste",
            kind="balance",
        )
    ]
    offers = session.exec(
        select(RewardOffer)
        .where(RewardOffer.is_available == True)  # noqa: E712
        .order_by(RewardOffer.cost, RewardOffer.name)
    ).all()
    listings.extend(
        RewardListing(
            id=offer.id,
            name=offer.name,
            cost=offer.cost,
            description=offer.description,
            collection_info=offer.collection_info,
        )
        for offer in offers
    )
    return listings


def get_transaction_history(session: Session, user_id: int, limit: int = 10) -> list[TransactionEntry]:
    if limit <= 0:
        raise InvalidAmountError("limit must be positive")
    rows = session.exec(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .limit(limit)
    ).all()
    return [
        TransactionEntry(
            id=row.id,
            type=row.type.value,
            amount=row.amount,
            description=row.description,
            date=format_date(row.date),
        )
        for row in rows
    ]


def create_offer(
    session: Session,
    name: str,
    cost: int,
    description: Optional[str] = None,
    collection_info: Optional[str] = None,
    is_available: bool = True,
) -> RewardOffer:
    if cost <= 0:
        raise InvalidAmountError("Reward cost must be positive")
    offer = RewardOffer(
        name=name.strip(),
        cost=cost,
        description=description.strip() if description else None,
        collection_info=collection_info.strip() if collection_info else None,
        is_available=is_available,
    )
    session.add(offer)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise PreconditionFailedError(f"A reward named {offer.name!r} already exists") from None
    session.refresh(offer)
    return offer
