import fcntl
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from alembic.config import Config

from alembic import command
from matchday.utils.logging import logger

BACKEND_DIR = Path(__file__).resolve().parents[2]
ALEMBIC_INI_PATH = BACKEND_DIR / "alembic.ini"
MIGRATION_LOCK_PATH = Path(tempfile.gettempdir()) / "matchday-alembic.lock"


@contextmanager
def migration_lock(lock_path: Path = MIGRATION_LOCK_PATH) -> Iterator[None]:
    # Workers of one deployment share the lock file, the first one upgrades the schema.
    with lock_path.open("w", encoding="utf-8") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_file, fcntl.LOCK_UN)


def get_alembic_config() -> Config:
    """
    Load `alembic.ini` from the backend directory and point it at the migration scripts there.

    The app may be started from the repository root or from `backend/`, relative paths in the ini
    file would resolve against whichever directory is current.
    """
    alembic_config = Config(str(ALEMBIC_INI_PATH))
    alembic_config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return alembic_config


def alembic_run_migrations(revision: str = "head") -> None:
    with migration_lock():
        logger.info(f"Upgrading database schema to revision {revision!r}")
        command.upgrade(get_alembic_config(), revision)
