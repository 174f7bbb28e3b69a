import re

uuid_regex = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
)


def is_valid_uuid(value: str) -> bool:
    """
    Check that `value` is a canonical string representation of an UUID, like the identifiers we generate.

    Other representations accepted by `uuid.UUID` (braces, urn prefix, no hyphens) are rejected,
    as well as any surrounding character, including a trailing newline.
    """
    return uuid_regex.fullmatch(value.lower()) is not None
