class BaseDriverException(Exception):
    """Base exception for driver exceptions. Notes name the driver and statement involved, when known."""
    def __init__(self, *args, driver: "BaseDriver | type[BaseDriver] | None" = None, statement: str | None = None):
        super().__init__(*args)

        self.driver = driver
        self.statement = statement
        if driver is not None:
            self.add_note(f" - Using Driver: {driver!r}")

        if statement is not None:
            self.add_note(f" - Statement: {statement}")


class DriverConnectFailed(BaseDriverException):
    """Raised when a driver fails to connect to a database."""


class DriverQueryFailed(BaseDriverException):
    """Raised when the database rejects a statement."""


class DriverFetchFailed(DriverQueryFailed):
    """Raised when rows of an executed statement can't be fetched."""
