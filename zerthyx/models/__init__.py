from zerthyx.models.user import User, UserRole
from zerthyx.models.wallet import Wallet
from zerthyx.models.wallet_ledger import WalletLedger, LedgerType, LedgerCategory
from zerthyx.models.deposit import DepositRequest, RequestStatus
from zerthyx.models.nft_deposit import NftDeposit
from zerthyx.models.withdrawal import WithdrawalRequest
from zerthyx.models.referral import Referral, ReferralStatus
from zerthyx.models.admin_setting import AdminSetting

__all__ = [
    "User",
    "UserRole",
    "Wallet",
    "WalletLedger",
    "LedgerType",
    "LedgerCategory",
    "DepositRequest",
    "RequestStatus",
    "NftDeposit",
    "WithdrawalRequest",
    "Referral",
    "ReferralStatus",
    "AdminSetting",
]
