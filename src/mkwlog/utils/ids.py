import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(_ALPHABET[rem])
    return "".join(reversed(out))


def generate_id() -> str:
    """
    returns a new profile id: millisecond timestamp plus a random suffix.

    two ids created in the same millisecond still differ in the suffix.
    """
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(8))
    return stamp + suffix
