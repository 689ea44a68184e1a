"""Error taxonomy for score sessions and the persistence layer."""


class OverlayError(Exception):
    """Base class for failures scoped to one score view session."""


class ScoreLoadError(OverlayError):
    """The render engine could not parse the symbolic score data."""

    def __init__(self, message: str, engine_log: str = "") -> None:
        super().__init__(message)
        self.engine_log = engine_log


class PageOutOfRange(OverlayError):
    """A page outside 1..page_count was requested."""

    def __init__(self, page: int, page_count: int) -> None:
        super().__init__(f"Page {page} outside 1..{page_count}")
        self.page = page
        self.page_count = page_count


class ScoreNotReady(OverlayError):
    """The session has no loaded score yet."""


class ElementNotFound(OverlayError):
    """An anchor or target element is missing from the current render."""

    def __init__(self, element_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Element not found: {element_id}")
        self.element_id = element_id


class NavigationError(OverlayError):
    """A jump target does not exist in the score."""


class SubmissionError(OverlayError):
    """Staged annotations could not be persisted."""


class EmptySubmission(SubmissionError):
    """Nothing staged, or no schema selected."""


class SubmissionRejected(SubmissionError):
    """The persistence layer refused the submission."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PersistenceError(Exception):
    """Base class for persistence layer failures."""


class NotFoundError(PersistenceError):
    """A referenced record does not exist."""


class ValidationFailure(PersistenceError):
    """A write violates a data model invariant."""


class SelectionRequired(OverlayError):
    """A placement needs a selected schema or note and there is none."""
