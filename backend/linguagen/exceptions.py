"""Error taxonomy shared by the services and mapped to HTTP errors by the routers."""


class LinguaGenError(Exception):
    """Base class for every error the core raises on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


# ── Record store ─────────────────────────────────────────────────────────────

class ParseError(LinguaGenError):
    """A persisted collection could not be decoded."""


class StorageQuotaExceeded(LinguaGenError):
    """The backing store refused a write."""


class InvalidBackupFormat(LinguaGenError):
    """An uploaded backup does not carry array-shaped students and lessons."""


# ── Entities ─────────────────────────────────────────────────────────────────

class StudentNotFound(LinguaGenError):
    pass


class LessonNotFound(LinguaGenError):
    pass


class ConfirmationRequired(LinguaGenError):
    """An irreversible action was requested without explicit confirmation."""


# ── Lesson documents ─────────────────────────────────────────────────────────

class DocumentSchemaError(LinguaGenError):
    """A lesson document does not match the lesson schema."""


class DocumentPathError(LinguaGenError):
    """A structural edit addressed a location that does not exist or has another type."""


# ── Generator ────────────────────────────────────────────────────────────────

class GenerationError(LinguaGenError):
    pass


class MissingCredentialError(GenerationError):
    pass


class RefinementError(LinguaGenError):
    pass


# ── Workflow ─────────────────────────────────────────────────────────────────

class WorkflowValidationError(LinguaGenError):
    pass


class WorkflowBusy(LinguaGenError):
    pass


class WorkflowClosed(LinguaGenError):
    pass
