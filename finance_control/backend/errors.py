class FinanceError(Exception):
    """Base error for the finance control backend"""


class ValidationError(FinanceError, ValueError):
    """Input rejected before it reaches the store"""


class NotFoundError(FinanceError, KeyError):
    """Referenced transaction, card or purchase does not exist"""

    def __str__(self):
        # KeyError quotes its message, keep it readable in API responses
        return str(self.args[0]) if self.args else ''
