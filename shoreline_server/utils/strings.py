__all__ = [
    "camelize",
    "indent",
    "parse_access_token",
    "parse_bearer_token",
]


def camelize(src: str) -> str:
    """Convert snake_case to camelCase."""
    components = src.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def indent(text: str, length: int = 4) -> str:
    """Indent a multi-line text."""
    return "\n".join([f"{length*' '}{s.rstrip()}" for s in text.split("\n")])


def parse_bearer_token(authorization: str | None) -> str | None:
    """Return the TOKEN part of a "Bearer TOKEN" header value.

    Return None if the header is missing, uses another scheme
    or carries an empty token.
    """
    if (not authorization) or not isinstance(authorization, str):
        return None
    try:
        # ttype is not a ttypo :)
        ttype, token = authorization.split(maxsplit=1)
    except ValueError:
        return None
    if ttype.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def parse_access_token(authorization: str | None) -> str | None:
    """Parse an authorization header value.

    Get a TOKEN from "Bearer TOKEN" and return a token
    string or None if the input value does not match
    the expected format (64 bytes string)
    """
    token = parse_bearer_token(authorization)
    if token is None or len(token) != 64:
        return None
    return token
