from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from zerthyx.core.database import get_db
from zerthyx.dependencies import get_current_user
from zerthyx.models import User
from zerthyx.schemas.wallet import WalletStateOut, LedgerOut, NftSummaryOut, ReleasePrincipalOut
from zerthyx.services.deposits import get_nft_summary, release_matured_principal
from zerthyx.services.wallet import get_wallet_state, list_ledger

router = APIRouter()


@router.get("/me", response_model=WalletStateOut)
def get_wallet(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_wallet_state(db, user.id)


@router.get("/ledger", response_model=list[LedgerOut])
def get_ledger(
    limit: int = Query(default=50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return list_ledger(db, user.id, limit=limit)


@router.get("/nft-summary", response_model=NftSummaryOut)
def nft_summary(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_nft_summary(db, user.id)


@router.post("/release-principal", response_model=ReleasePrincipalOut)
def release_principal(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return release_matured_principal(db, user.id)
