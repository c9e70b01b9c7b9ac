from .user import User
from .wallet import Wallet, level_for
from .reward_offer import RewardOffer
from .transaction import Transaction, TransactionType, EARNED_TYPES
from .report import Report, ReportStatus, CollectedWaste, TERMINAL_STATUSES
from .notification import Notification

__all__ = [
    "User",
    "Wallet", "level_for",
    "RewardOffer",
    "Transaction", "TransactionType", "EARNED_TYPES",
    "Report", "ReportStatus", "CollectedWaste", "TERMINAL_STATUSES",
    "Notification",
]
