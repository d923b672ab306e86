from passlib.context import CryptContext

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class PasswordHasher:
    @staticmethod
    def hash_password(password: str) -> str:
        return password_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        try:
            return password_context.verify(plain_password, hashed_password)
        except ValueError:
            # Not a hash passlib recognises (e.g. a hand-edited record)
            return False
