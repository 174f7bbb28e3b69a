"""
Normalizers reused by several schemas, with `field_validator("field")(normalizer)`.
See https://docs.pydantic.dev/latest/concepts/validators/#reuse-validators
"""


def email_normalizer(email: str) -> str:
    """Emails are compared case-insensitively: they are stored lowercased, without surrounding spaces"""
    return email.strip().lower()


def trailing_spaces_remover(value: str | None) -> str | None:
    """Strip surrounding spaces. `None` is kept, for optional fields."""
    return None if value is None else value.strip()
