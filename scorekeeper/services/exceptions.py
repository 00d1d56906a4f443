"""Exception hierarchy for the scorekeeper services."""


class ScorekeeperError(Exception):
    """Base class for all scorekeeper errors."""
    pass


class StorageError(ScorekeeperError):
    """Reading from or writing to the durable store failed."""
    pass


class StorageFullError(StorageError):
    """The durable store has no room left for a write."""
    pass


class ScoreValidationError(ScorekeeperError):
    """A score action was rejected before any state changed."""
    pass


class RosterFetchError(ScorekeeperError):
    """The roster source could not be reached or returned garbage."""
    pass


class SubmissionError(ScorekeeperError):
    """Posting the score log to the submission sink failed."""
    pass


class RestorePendingError(ScorekeeperError):
    """A command arrived before the restore decision was made."""
    pass
