"""
Credential Guard

Salted hashing and constant-time verification of burn passwords.
"""

from werkzeug.security import check_password_hash, generate_password_hash


class CredentialGuard:
    """
    Hashes and verifies optional burn passwords.

    Hashes use werkzeug's ``pbkdf2:sha256:<iterations>$<salt>$<hex>`` format,
    so the iteration count can be raised without invalidating old records.
    """

    def __init__(self, iterations: int = 200_000):
        if iterations <= 0:
            raise ValueError("Iterations must be positive")
        self.iterations = iterations

    @property
    def method(self) -> str:
        return f"pbkdf2:sha256:{self.iterations}"

    def hash(self, password: str) -> str:
        return generate_password_hash(password, method=self.method)

    def verify(self, password: str, stored_hash: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        Malformed hashes never verify.
        """
        if not isinstance(password, str) or not password or not stored_hash:
            return False
        try:
            return check_password_hash(stored_hash, password)
        except ValueError:
            return False
