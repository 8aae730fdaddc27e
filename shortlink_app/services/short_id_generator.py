import secrets
import string
from random import Random
from typing import List, Optional

from shortlink_app.config import settings


class ShortIdGenerator:
    """
    Random short id generator.

    Every id contains at least one letter and at least one digit so that it
    passes the custom id rules by construction. The remaining positions are
    uniform over the 62-symbol alphanumeric alphabet and the whole id is
    shuffled afterwards, so the guaranteed characters have no fixed position.

    Collisions are not handled here; the link service checks the store and
    asks for another id.
    """

    LETTERS = string.ascii_letters
    DIGITS = string.digits
    ALPHABET = LETTERS + DIGITS

    def __init__(self, length: int = settings.short_id_length, rng: Optional[Random] = None):
        """
        Args:
            length: Number of characters per id (at least 2)
            rng: Random source, secrets.SystemRandom() unless given
        """
        if length < 2:
            raise ValueError("Short id length must be at least 2")
        self.length = length
        self.rng = rng or secrets.SystemRandom()

    def generate(self) -> str:
        chars: List[str] = [
            self.rng.choice(self.LETTERS),
            self.rng.choice(self.DIGITS),
        ]
        chars.extend(self.rng.choice(self.ALPHABET) for _ in range(self.length - 2))

        # Fisher-Yates
        for i in range(len(chars) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            chars[i], chars[j] = chars[j], chars[i]

        return "".join(chars)
