from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select

from waste_rewards.config import settings
from waste_rewards.db import get_session
from waste_rewards.dependencies import require_role, require_user
from waste_rewards.models import RewardOffer, User
from waste_rewards.schemas.rewards import (
    RewardListing,
    RewardOfferForm,
    RewardOfferRead,
    TransactionEntry,
    WalletRead,
)
from waste_rewards.services import ledger

router = APIRouter()


@router.get("/", response_model=List[RewardListing])
def list_rewards(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return ledger.list_available_rewards(session, current_user.id)


@router.get("/balance", response_model=WalletRead)
def balance(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return WalletRead.model_validate(ledger.get_or_create_wallet(session, current_user.id))


@router.get("/transactions", response_model=List[TransactionEntry])
def transactions(
    limit: int = Query(settings.TRANSACTION_HISTORY_LIMIT, ge=1, le=100),
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return ledger.get_transaction_history(session, current_user.id, limit=limit)


@router.post("/redeem-all", response_model=WalletRead)
def redeem_all(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return WalletRead.model_validate(ledger.redeem_all(session, current_user.id))


@router.post("/{offer_id}/redeem", response_model=WalletRead)
def redeem(
    offer_id: int,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_session),
):
    return WalletRead.model_validate(ledger.redeem(session, current_user.id, offer_id))


@router.get("/offers", response_model=List[RewardOfferRead])
def list_offers(current_user: User = Depends(require_user), session: Session = Depends(get_session)):
    return session.exec(select(RewardOffer).order_by(RewardOffer.name)).all()


@router.post("/offers", response_model=RewardOfferRead, status_code=status.HTTP_201_CREATED)
def create_offer(
    form_data: RewardOfferForm = Depends(RewardOfferForm.as_form),
    current_user: User = Depends(require_role("admin")),
    session: Session = Depends(get_session),
):
    return ledger.create_offer(
        session,
        name=form_data.name,
        cost=form_data.cost,
        description=form_data.description,
        collection_info=form_data.collection_info,
        is_available=form_data.is_available,
    )
