"""Infrastructure layer exceptions."""


class InfrastructureError(Exception):
    """Base infrastructure error."""
    pass


class DatabaseError(InfrastructureError):
    """Database operation error."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Database connection error."""
    pass


class UnitOfWorkClosedError(DatabaseError):
    """A closed unit of work was used."""
    pass


class NamedQueryError(DatabaseError):
    """Named query registry error."""
    pass


class UnknownNamedQueryError(NamedQueryError):
    """No query is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Named query not registered: {name}")


class DuplicateNamedQueryError(NamedQueryError):
    """A query is already registered under the name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Named query already registered: {name}")


class UnknownParameterError(NamedQueryError):
    """The named query has no bind parameter with the given name."""

    def __init__(self, query_name: str, parameter: str):
        self.query_name = query_name
        self.parameter = parameter
        super().__init__(
            f"Named query '{query_name}' has no parameter '{parameter}'"
        )
