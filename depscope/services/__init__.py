"""Service layer — persistence operations and the error taxonomy shared by all layers."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""


class AlreadyExistsError(ServiceError):
    """Resource already exists (-> HTTP 409)."""


class ValidationError(ServiceError):
    """Input validation error (-> HTTP 422)."""


class InternalError(ServiceError):
    """Remote transport/decoding or storage failure (-> HTTP 500)."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(f"project not found: {name}@{version}")


class NoDependentProjectsError(NotFoundError):
    def __init__(self, dependency_name: str) -> None:
        self.dependency_name = dependency_name
        super().__init__(f"no project depends on: {dependency_name}")


class DependencyNotFoundError(NotFoundError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"dependency not found: {name}")


class DependencyExistsError(AlreadyExistsError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"dependency already exists: {name}")
