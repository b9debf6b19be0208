"""Exception types raised by DepHealth.

Only structural problems with ingested data are errors.  An unknown
dependency or an unparseable dependency version is a normal outcome and is
reported as an empty result instead.
"""


class DepHealthError(Exception):
    """Base class for all DepHealth errors."""


class ValidationError(DepHealthError, ValueError):
    """A vulnerability record was rejected during corpus ingestion.

    Attributes:
        index: Position of the offending record in the submitted batch.
        record_id: Advisory identifier of the record, when one was readable.
    """

    def __init__(self, message: str, index: int | None = None, record_id: str | None = None):
        super().__init__(message)
        self.index = index
        self.record_id = record_id
