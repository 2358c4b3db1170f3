class MappifyError(Exception):
    """Base class for every error raised by mappify."""


class ValidationError(MappifyError, ValueError):
    """Bad options or a malformed `where` expression. Raised before any SQL runs."""


class NotFoundError(MappifyError, LookupError):
    """A strict finder (``*_and_delete``, ``find_one_and_update``) matched no row."""


class AssociationError(MappifyError, LookupError):
    """Unknown or duplicate association alias, or an unresolvable target."""


class SessionError(MappifyError):
    """The instance is not bound to a session."""


class DatabaseError(MappifyError):
    def __init__(self, message, sql=None, params=None):
        super().__init__(message)
        self.sql = sql
        self.params = params


class TransactionError(DatabaseError):
    pass
