"""Errors raised by the service layer.

Routers never catch these; ``main.create_app`` maps each family to an HTTP
status in one exception handler.
"""


class LedgerError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- not found ---

class NotFoundError(LedgerError):
    status_code = 404


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} does not exist")
        self.user_id = user_id


class ReportNotFoundError(NotFoundError):
    def __init__(self, report_id: int):
        super().__init__(f"Report with ID {report_id} does not exist")
        self.report_id = report_id


class RewardNotFoundError(NotFoundError):
    def __init__(self, offer_id: int):
        super().__init__(f"Reward {offer_id} does not exist")
        self.offer_id = offer_id


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: int):
        super().__init__(f"Notification {notification_id} does not exist")
        self.notification_id = notification_id


# --- precondition failed ---

class PreconditionFailedError(LedgerError):
    status_code = 400


class InvalidAmountError(PreconditionFailedError):
    pass


class InsufficientPointsError(PreconditionFailedError):
    def __init__(self, message: str = "Insufficient points or invalid reward"):
        super().__init__(message)


class InvalidStatusTransitionError(PreconditionFailedError):
    pass


class ReportAlreadyCollectedError(PreconditionFailedError):
    def __init__(self, report_id: int, status: str):
        super().__init__(f"Report {report_id} is already in {status} status")
        self.report_id = report_id
        self.status = status


# --- conflict ---

class ConcurrentUpdateError(LedgerError):
    """The wallet changed between read and write; the request may be retried."""

    status_code = 409


# --- upstream ---

class UpstreamError(LedgerError):
    status_code = 502


class VerificationError(UpstreamError):
    pass
