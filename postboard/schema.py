'''Versioned schema changes for the ``posts`` store.

Revisions live in ``postboard/migrations/versions`` and are applied through
Alembic on the engine owned by Flask-SQLAlchemy, so the application and its
migrations always talk to the same database.
'''
import os
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from flask import current_app

from postboard.models import db

MIGRATIONS_DIR : str = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'migrations')


def alembic_config() -> Config:
    config : Config = Config()
    config.set_main_option('script_location', MIGRATIONS_DIR)
    config.set_main_option('sqlalchemy.url', db.engine.url.render_as_string(hide_password=False).replace('%', '%%'))
    return config


def upgrade(revision:str='head') -> None:
    '''Apply revisions up to ``revision``.'''
    config : Config = alembic_config()
    current_app.logger.info('Upgrading schema to %s', revision)
    with db.engine.begin() as connection:
        config.attributes['connection'] = connection
        command.upgrade(config, revision)


def downgrade(revision:str='-1') -> None:
    '''Revert revisions down to ``revision`` (one step by default).'''
    config : Config = alembic_config()
    current_app.logger.info('Downgrading schema to %s', revision)
    with db.engine.begin() as connection:
        config.attributes['connection'] = connection
        command.downgrade(config, revision)


def current_revision() -> Optional[str]:
    with db.engine.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()


def head_revision() -> Optional[str]:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()
