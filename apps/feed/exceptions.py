"""
Feed inventory exceptions.

Raised inside transaction.atomic blocks so a failed ledger step rolls back the
whole unit of work; the service layer turns them into {'success': False} results.
"""


class FeedInventoryError(Exception):
    """Base exception for feed and inventory operations"""
    pass


class InventoryNotFound(FeedInventoryError):
    """Raised when no active inventory row exists for a type"""
    pass


class InsufficientStock(FeedInventoryError):
    """Raised when a deduction exceeds the available balance"""
    pass


class UnknownFeedType(FeedInventoryError):
    """Raised when a feed_details key is not a known feed type"""
    pass


class FeedProgramNotFound(FeedInventoryError):
    """Raised when no feed program can be resolved for a flock"""
    pass


class UsageNotFound(FeedInventoryError):
    """Raised when a feed usage record does not exist"""
    pass
