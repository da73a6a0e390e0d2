import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger("migrations")


def upgrade_head(*, database_url: str) -> None:
    """Run `alembic upgrade head` using photoblog/alembic.ini."""
    pkg_dir = Path(__file__).resolve().parent
    root = pkg_dir.parent
    ini_path = pkg_dir / "alembic.ini"
    if not ini_path.exists():
        raise RuntimeError(f"alembic.ini not found at {ini_path}")

    alembic_cfg = AlembicConfig(str(ini_path))
    # Ensure `import photoblog.*` works regardless of CWD.
    alembic_cfg.set_main_option("prepend_sys_path", str(root))
    alembic_cfg.set_main_option("script_location", str(pkg_dir / "alembic"))
    # ConfigParser interpolation treats "%" specially.
    alembic_cfg.set_main_option(
        "sqlalchemy.url", database_url.replace("%", "%%")
    )

    logger.info("Running alembic upgrade head")
    command.upgrade(alembic_cfg, "head")
    logger.info("Alembic upgrade complete")
