from __future__ import annotations


class TeamCitySdkError(RuntimeError):
    """Base class for fatal errors; the CLI exits non-zero on these."""


class InstallationUnreadable(TeamCitySdkError):
    pass


class InstallationMissing(TeamCitySdkError):
    pass


class RetrieverLoadError(TeamCitySdkError):
    """Raised when a configured retriever reference cannot be resolved."""
