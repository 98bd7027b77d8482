import secrets
import string

ALPHABET = string.ascii_letters + string.digits

def generate_random_code(length: int = 7) -> str:
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
