"""Alembic migration runner shared by deployment scripts and integration tests."""

from alembic.config import Config

from alembic import command


def run_migrations_sync(revision: str = "head") -> None:
    """Run Alembic migrations synchronously up to ``revision``.

    Call from a worker thread (``asyncio.to_thread``) when inside an event
    loop: the Alembic environment opens its own sync engine.
    """
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, revision)
