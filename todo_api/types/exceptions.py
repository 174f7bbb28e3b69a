class MissingTZInfoInDatetimeError(TypeError):
    def __init__(self):
        super().__init__("tzinfo info is required for datetime objects")


class DotenvMissingVariableError(Exception):
    def __init__(self, variable_name: str):
        super().__init__(f"{variable_name} should be configured in the dotenv")


class InvalidAppStateTypeError(Exception):
    def __init__(self):
        super().__init__(
            "The request state is not a dict nor a starlette State object",
        )


class InvalidUserDataError(Exception):
    """
    The data sent to create an account is not acceptable.

    Mapped to a 400 response.
    """


class UserWithEmailAlreadyExistError(InvalidUserDataError):
    def __init__(self, email: str):
        super().__init__(
            f"An account with the email {email} already exist",
        )


class PasswordTooShortError(InvalidUserDataError):
    def __init__(self, min_length: int):
        super().__init__(
            f"The password must be at least {min_length} characters long",
        )


class InvalidCredentialsError(Exception):
    """
    The email or the password sent to the login endpoint is invalid.

    We never tell which one was wrong. Mapped to a 400 response, with the same shape as `InvalidUserDataError`.
    """

    def __init__(self):
        super().__init__("Invalid email or password")


class UnauthorizedError(Exception):
    """
    The request does not carry a known session token.

    Mapped to a 401 response with an empty body.
    """


class StorageError(Exception):
    """
    The database failed to persist a change.

    Cruds wrap the underlying `SQLAlchemyError` in this exception. It is mapped to a 400 response for mutating requests
    and to a 500 response otherwise.
    """

    def __init__(self):
        super().__init__("The database could not process the request")
