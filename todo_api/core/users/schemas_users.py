from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from todo_api.utils import validators


class CoreUserPublic(BaseModel):
    """
    Public representation of a user, safe to return in responses.

    The password hash and the session tokens are never included.
    """

    id: str = Field(serialization_alias="_id")
    email: str

    model_config = ConfigDict(from_attributes=True)


class CoreUserCreateRequest(BaseModel):
    """
    The schema is used to create an account.

    The password length is checked by the endpoint as the minimum length is a setting.
    """

    email: EmailStr
    password: str

    # Email normalization, this will modify the email variable
    # https://docs.pydantic.dev/latest/concepts/validators/#reuse-validators
    _normalize_email = field_validator("email")(validators.email_normalizer)


class CoreUserLoginRequest(BaseModel):
    email: str
    password: str

    _normalize_email = field_validator("email")(validators.email_normalizer)
