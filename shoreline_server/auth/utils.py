from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import BadRequestException
from shoreline_server.utils import create_hash, hash_data


def validate_password(password: str) -> None:
    """Ensure the password is at least auth_pass_min_length characters long."""
    if len(password) < shorelineconfig.auth_pass_min_length:
        raise BadRequestException(
            "Password must be at least "
            f"{shorelineconfig.auth_pass_min_length} characters"
        )


def hash_password(password: str, salt: str = "") -> str:
    """Create a hash string from a given password and salt,
    and pepper from the config.
    """
    return hash_data(f"{password}:{salt}:{shorelineconfig.auth_pass_pepper}")


def create_password(password: str) -> str:
    """Create a hash:salt string from a given password."""
    salt = create_hash()
    pass_hash = hash_password(password, salt)
    return f"{pass_hash}:{salt}"


def is_authorized_admin_email(email: str | None) -> bool:
    """Only addresses listed in authorized_admin_emails may sign in."""
    if not email:
        return False
    return email.strip().lower() in shorelineconfig.admin_emails
