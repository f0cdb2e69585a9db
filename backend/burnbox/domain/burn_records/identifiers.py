"""
Identifier & Link Generator

Produces record identifiers and collision-checked short codes.
"""

import secrets
import string
import uuid
from typing import Callable

from ..errors import NamespaceExhaustedError

SHORT_CODE_ALPHABET = string.ascii_letters + string.digits


class IdentifierGenerator:
    """
    Generates burn ids and short codes.

    Short codes come from a cryptographically secure source so they cannot
    be enumerated.
    """

    def __init__(self, short_code_length: int = 8, max_attempts: int = 5):
        if short_code_length <= 0:
            raise ValueError("Short code length must be positive")
        if max_attempts <= 0:
            raise ValueError("Max attempts must be positive")
        self.short_code_length = short_code_length
        self.max_attempts = max_attempts

    def new_id(self) -> str:
        return str(uuid.uuid4())

    def random_short_code(self) -> str:
        return "".join(
            secrets.choice(SHORT_CODE_ALPHABET) for _ in range(self.short_code_length)
        )

    def new_short_code(self, is_taken: Callable[[str], bool]) -> str:
        """
        Draw a short code not already in use.

        Args:
            is_taken: Callable returning True when a code already exists

        Returns:
            Unused short code

        Raises:
            NamespaceExhaustedError: If every attempt collided
        """
        for _ in range(self.max_attempts):
            code = self.random_short_code()
            if not is_taken(code):
                return code
        raise NamespaceExhaustedError(
            f"Could not generate a unique short code after {self.max_attempts} attempts"
        )


def build_share_url(base_url: str, short_code: str) -> str:
    """Public link recipients open to fetch a burn."""
    return f"{base_url.rstrip('/')}/d/{short_code}"
