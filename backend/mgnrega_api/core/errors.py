"""Error taxonomy for the data-source tiers and the query layer."""


class DataSourceError(Exception):
    """A tier could not produce data. Never fatal to a query."""

    kind = "DataSourceError"

    def __init__(self, message, source=None):
        super().__init__(message)
        self.message = message
        self.source = source


class FileNotFound(DataSourceError, FileNotFoundError):
    kind = "FileNotFound"


class RemoteUnavailable(DataSourceError):
    kind = "RemoteUnavailable"


class PersistenceUnavailable(DataSourceError):
    kind = "PersistenceUnavailable"


class MissingParameter(ValueError):
    """Raised when a district-scoped query gets no district name."""

    kind = "MissingParameter"

    def __init__(self, parameter, message=None):
        self.parameter = parameter
        self.message = message or f"{parameter.capitalize()} parameter is required"
        super().__init__(self.message)
