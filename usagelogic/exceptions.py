class UsageLogicError(Exception): ...


class ValidationError(UsageLogicError): ...


class NotFoundError(UsageLogicError): ...


class DuplicateError(UsageLogicError): ...


class ConfigurationError(UsageLogicError): ...


def require(
    condition: bool, message: str, exc: type[UsageLogicError] = UsageLogicError
):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)


class VersionConflictError(DuplicateError): ...
