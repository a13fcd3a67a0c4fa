# easybuy/services/credentials.py
import bcrypt

from easybuy.utils.settings import BCRYPT_ROUNDS


class CredentialStore:
    """Jednokierunkowy hash hasel (bcrypt), bez odzyskiwania."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        hashed = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # zly format hasha albo haslo > 72 bajty
            return False
