import os
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from adstudio.errors import ConfigError
from adstudio.models.secret import Secret


def _clean(value: Optional[str]) -> str:
    # Keys pasted into .env files often carry quotes or a trailing newline
    return (value or "").strip().strip('"').strip("'")


def get_secret(db: Optional[Session], key: str) -> str:
    """
    Look up a provider credential.

    The `secrets` table wins; the environment variable of the same name is
    the fallback. Raises ConfigError when neither has a value.
    """
    if db is not None:
        row = db.query(Secret).filter(Secret.key == key).first()
        if row is not None and _clean(row.value):
            return _clean(row.value)

    value = _clean(os.getenv(key))
    if value:
        return value

    logger.error(f"🔑 Secret {key} is not configured")
    raise ConfigError(f"{key} is not configured")


def set_secret(db: Session, key: str, value: str) -> None:
    row = db.query(Secret).filter(Secret.key == key).first()
    if row is None:
        db.add(Secret(key=key, value=value))
    else:
        row.value = value
    db.commit()
