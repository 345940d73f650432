"""
Application exceptions shared by services, dependencies and routes.

Services raise these; ``main.create_app`` maps them onto HTTP responses.
"""


class TodoAppError(Exception):
    """Base class for errors raised by the to-do list application."""


class EntityNotFoundError(TodoAppError):
    """
    The entity does not exist, or the caller has no role on it.

    Both cases are reported the same way so that callers cannot probe for
    lists they were never given access to.
    """

    def __init__(self, entity_name: str, entity_id: int | None = None):
        self.entity_name = entity_name
        self.entity_id = entity_id
        if entity_id is None:
            message = f"{entity_name} not found"
        else:
            message = f"{entity_name} with id {entity_id} not found"
        super().__init__(message)


class PermissionDeniedError(TodoAppError):
    """The caller can see the entity but its role does not allow the operation."""


class UnableToCreateError(TodoAppError):
    def __init__(self, entity_name: str, cause: Exception | None = None):
        self.entity_name = entity_name
        super().__init__(f"Unable to create {entity_name}")
        self.__cause__ = cause


class UnableToUpdateError(TodoAppError):
    def __init__(self, entity_name: str, entity_id: int, cause: Exception | None = None):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"Unable to update {entity_name} with id {entity_id}")
        self.__cause__ = cause


class UnableToDeleteError(TodoAppError):
    def __init__(self, entity_name: str, entity_id: int, cause: Exception | None = None):
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(f"Unable to delete {entity_name} with id {entity_id}")
        self.__cause__ = cause


class TokenValidationError(TodoAppError):
    """
    An inbound bearer token was rejected.

    ``code`` is one of the TOKEN_* / AUTH_FAILED constants in
    ``todo_app.utils.auth`` and ends up in the 401 response body.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class InvalidRequestError(TodoAppError):
    """The request is well-formed but cannot be applied, e.g. an unknown role name."""
