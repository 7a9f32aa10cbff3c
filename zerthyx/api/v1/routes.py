from fastapi import APIRouter
from zerthyx.api.v1.endpoints import wallet, deposits, withdrawals, referrals, admin

router = APIRouter()

router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
router.include_router(deposits.router, prefix="/deposits", tags=["deposits"])
router.include_router(withdrawals.router, prefix="/withdrawals", tags=["withdrawals"])
router.include_router(referrals.router, prefix="/referrals", tags=["referrals"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
