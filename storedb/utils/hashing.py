# storedb/utils/hashing.py
from werkzeug.security import generate_password_hash, check_password_hash

# 22 characters from werkzeug's 62-symbol alphabet give more than 128 bits
SALT_LENGTH = 22


def get_password_hash(password: str) -> tuple[str, str]:
    """Hash ``password`` with a fresh random salt.

    Returns ``(password_hash, salt)``. The werkzeug hash string embeds the
    salt as its middle ``$`` segment; it is also returned separately so it
    can be stored in its own column.
    """
    pwhash = generate_password_hash(password, salt_length=SALT_LENGTH)
    salt = pwhash.split("$", 2)[1]
    return pwhash, salt


def verify_password(password: str, password_hash: str, salt: str) -> bool:
    if not password_hash:
        return False
    # A record whose salt column disagrees with its hash has been tampered with
    parts = password_hash.split("$", 2)
    if len(parts) != 3 or parts[1] != salt:
        return False
    return check_password_hash(password_hash, password)
