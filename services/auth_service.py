from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from jose import jwt
from core.config import settings, Settings


def create_access_token(data: Dict[str, Any], config: Optional[Settings] = None) -> str:
    """Create a JWT access token with expiration"""
    config = config or settings
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_token(token: str, config: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and validate a JWT token"""
    config = config or settings
    return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
