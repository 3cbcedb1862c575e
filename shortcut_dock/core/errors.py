# shortcut_dock/core/errors.py

"""
The error vocabulary of the ingestion pipeline.

Every failure that can happen to a single item has its own type so the
Item Processor can record an accurate cause on the item. None of these
escape the processor: the orchestrators only ever see a boolean outcome.
"""


class IngestError(Exception):
    """Base class for every error raised inside the ingestion pipeline."""


class PathLookupError(IngestError, LookupError):
    """The path could not be inspected at all (stat failed, blank input)."""


class ValidationError(IngestError):
    """The path exists (or may exist) but breaks the legality rules for its kind."""


class NotFoundError(IngestError):
    """The path was inspected but is not there at check time."""


class IconResolutionError(IngestError):
    """An icon could not be produced. Always downgraded to 'no icon'."""


class CreationError(IngestError):
    """The shortcut collaborator rejected the payload. The message is shown to the user."""


class StorageError(IngestError):
    """The shortcut store could not load, validate or persist its document."""


class InvalidTransitionError(IngestError):
    """An item was asked to move backwards in its status state machine."""


class LaunchError(IngestError):
    """A stored shortcut could not be opened: unknown id, missing target, or the opener refused."""
