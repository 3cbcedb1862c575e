# shortcut_dock/core/path_inspector.py

import logging

from .capabilities import PathCapabilities
from .errors import PathLookupError
from .models import PathDescriptor

logger = logging.getLogger(__name__)


class PathInspector:
    """
    The Path Classifier and Path Validator.

    Stateless apart from the collaborator it delegates to. Classification
    answers "what is this?", validation answers "is it legal for its kind?",
    and existence is checked separately so the two failures can be told apart.
    """

    def __init__(self, capabilities: PathCapabilities):
        self.capabilities = capabilities

    async def classify(self, path: str) -> PathDescriptor:
        """
        Determines whether a path is a file or a directory and extracts its display name.

        Raises:
            PathLookupError: if the path is blank or the collaborator cannot inspect it.
        """
        if not path or not path.strip():
            raise PathLookupError("path is empty")

        path = path.strip()
        try:
            info = await self.capabilities.get_path_info(path)
        except PathLookupError:
            raise
        except LookupError as e:
            raise PathLookupError(str(e)) from e
        except OSError as e:
            raise PathLookupError(f"cannot inspect '{path}': {e}") from e

        return PathDescriptor(path=path, is_directory=info.is_directory, display_name=info.display_name)

    async def validate(self, descriptor: PathDescriptor) -> bool:
        """Checks legality with the directory-specific or file-specific rule, never the other."""
        try:
            if descriptor.is_directory:
                return bool(await self.capabilities.validate_directory_path(descriptor.path))
            return bool(await self.capabilities.validate_file_path(descriptor.path))
        except Exception as e:
            # A collaborator that refuses to answer has declared the path illegal.
            logger.warning(f"Validation of '{descriptor.path}' raised: {e}")
            return False

    async def check_exists(self, descriptor: PathDescriptor) -> bool:
        try:
            return bool(await self.capabilities.check_exists(descriptor.path))
        except Exception as e:
            logger.warning(f"Existence check of '{descriptor.path}' raised: {e}")
            return False


def derive_shortcut_name(descriptor: PathDescriptor) -> str:
    """
    Builds the display name for the new shortcut.

    Files lose their final extension ('report.final.pdf' -> 'report.final');
    directories keep their name untouched. A leading dot is part of the name,
    not an extension: '.bashrc' stays '.bashrc' where a plain strip-the-last-
    suffix rule would leave an empty name. Names without a stem or without an
    extension ('.bashrc', 'archive.', 'Makefile') are returned as they are.
    """
    name = descriptor.display_name
    if descriptor.is_directory:
        return name

    stem, dot, extension = name.rpartition(".")
    if not dot or not stem or not extension:
        return name
    return stem
