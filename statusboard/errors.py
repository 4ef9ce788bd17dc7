"""
Error types for Apex Status Board.

Every failure in the pipeline is fatal for the run. Each error carries the
name of the stage that raised it so the driver can report where the render
stopped.
"""


class StatusBoardError(Exception):
    """Base class for all pipeline failures."""

    stage = 'pipeline'

    def __init__(self, message: str, stage: str = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigError(StatusBoardError):
    """Missing or invalid configuration value."""

    stage = 'config'


class ProviderError(StatusBoardError):
    """The remote data provider query failed."""

    stage = 'provider'


class AssetFetchError(StatusBoardError):
    """Network or decode failure for an asset in a batch."""

    stage = 'fetch'


class CacheIOError(StatusBoardError):
    """Filesystem failure reading or writing a cache entry."""

    stage = 'cache'


class FontError(StatusBoardError):
    """Font file unreadable or undecodable."""

    stage = 'font'


class RenderError(StatusBoardError):
    """A draw, overlay or save operation failed."""

    stage = 'render'
