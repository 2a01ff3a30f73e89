import hashlib
import secrets

import bcrypt


def _truncate_password(password: str) -> bytes:
    """
    bcrypt only looks at the first 72 bytes; cut longer passwords on a
    UTF-8 character boundary.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes

    truncated = password
    while len(truncated.encode("utf-8")) > 72:
        truncated = truncated[:-1]
    return truncated.encode("utf-8")


def get_password_hash(password: str) -> str:
    """
    Hash a password with bcrypt.
    """
    password_bytes = _truncate_password(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """
    Check a plain password against a stored bcrypt hash.
    """
    plain_bytes = _truncate_password(plain)
    hashed_bytes = hashed.encode("utf-8")
    try:
        return bcrypt.checkpw(plain_bytes, hashed_bytes)
    except ValueError:
        # malformed hash in the database
        return False


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://gravatar.com/avatar/{digest}?d=identicon"
