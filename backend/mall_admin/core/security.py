from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List, Iterable
from jose import JWTError, jwt
import bcrypt
from mall_admin.config import Settings
from mall_admin.core.exceptions import Unauthorized

WILDCARD_PERMISSION = "*"


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a password against its bcrypt hash
    """
    password_bytes = plain_password.encode('utf-8')
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


class TokenAuthority:
    """
    Issues and validates access tokens and resolves role permissions

    Built once from Settings at application start and stored on app.state,
    so the secret and the role -> permission lists are explicit configuration
    instead of module level constants.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 120,
        role_permissions: Optional[Dict[str, List[str]]] = None,
        default_permissions: Optional[List[str]] = None,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.role_permissions = {k: list(v) for k, v in (role_permissions or {}).items()}
        self.default_permissions = list(default_permissions or [])

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenAuthority":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
            role_permissions=settings.ROLE_PERMISSIONS,
            default_permissions=settings.DEFAULT_PERMISSIONS,
        )

    def create_access_token(self, data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT carrying the given claims

        The token always carries:
        - user_id: id of the admin user
        - username: used for created_by/updated_by
        - role: used to resolve permissions
        """
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT

        Raises:
            Unauthorized: if the token is invalid or expired
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise Unauthorized(f"Invalid or expired token: {e}")

    def permissions_for(self, role: Optional[str], role_override: Optional[Iterable[str]] = None) -> List[str]:
        """
        Permission codes for a role

        A stored Role record (role_override) wins over the configured mapping.
        """
        if role_override is not None:
            return list(role_override)
        if role and role in self.role_permissions:
            return list(self.role_permissions[role])
        return list(self.default_permissions)

    @staticmethod
    def has_permission(granted: Iterable[str], code: str) -> bool:
        granted = set(granted)
        return WILDCARD_PERMISSION in granted or code in granted
