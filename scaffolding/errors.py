"""Exceptions raised by the scaffolding pipeline."""


class ScaffoldError(Exception):
    """Base class for scaffolding failures."""

    pass


class OperationCancelled(ScaffoldError):
    """Raised when the user cancels an interactive prompt."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)


class RegistryError(ScaffoldError):
    """Raised when a registry operation fails."""

    pass


class PackageDetailError(RegistryError):
    """Raised when the package detail lookup fails."""

    pass


class DownloadError(RegistryError):
    """Raised when a template archive cannot be downloaded or extracted."""

    pass


class SearchError(RegistryError):
    """Raised when the template search fails."""

    pass


class NoTemplatesFound(ScaffoldError):
    """Raised when there is no template to select from."""

    pass


class TargetError(ScaffoldError):
    """Raised when the target directory cannot be used or prepared."""

    pass


class InstantiationError(ScaffoldError):
    """Raised when a template entry cannot be written to the target."""

    pass
