"""
Data access exceptions
"""


class DataAccessError(Exception):
    """Base class for errors translated at the repository boundary"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class RecordNotFoundError(DataAccessError):
    """The id is not a valid record id, or no row carries it"""

    def __init__(self, message: str = "record not found"):
        super().__init__(message)


class EditConflictError(DataAccessError):
    """The row exists but its version moved on since the caller read it"""

    def __init__(self, message: str = "unable to update the record due to an edit conflict, please try again"):
        super().__init__(message)
