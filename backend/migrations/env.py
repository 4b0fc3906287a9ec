from __future__ import annotations
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv
import os, sys

# run from backend/: make the vendor_portal package importable
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
load_dotenv()

from vendor_portal.models.authz import Base  # noqa: E402
from vendor_portal.models import audit, vendor, product  # noqa: E402,F401  register tables on Base

alembic_cfg = context.config
if alembic_cfg.config_file_name is not None:
    fileConfig(alembic_cfg.config_file_name)

# same variable and default the Flask factory reads
alembic_cfg.set_main_option('sqlalchemy.url', os.getenv('DATABASE_URL', 'sqlite:///dev.db'))

# batch mode lets ALTER-style migrations run on SQLite
CONFIGURE_OPTS = dict(target_metadata=Base.metadata, render_as_batch=True, compare_type=True)


def run_offline():
    context.configure(url=alembic_cfg.get_main_option('sqlalchemy.url'), literal_binds=True, **CONFIGURE_OPTS)
    with context.begin_transaction():
        context.run_migrations()


def run_online():
    engine = engine_from_config(alembic_cfg.get_section(alembic_cfg.config_ini_section, {}), prefix='sqlalchemy.', poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **CONFIGURE_OPTS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
