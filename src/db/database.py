import logging
import os
import sqlite3
from typing import List

from core.models import SortMethod
from core.performance import RecoveryPolicy
from db.models import Config

logger = logging.getLogger(__name__)

CURRENT_DB_VERSION = 2


def initialize_database(app_data_dir: str) -> sqlite3.Connection:
    os.makedirs(app_data_dir, exist_ok=True)
    sqlite_path = os.path.join(app_data_dir, "db.sqlite3")
    logger.info("Database file path: %s", sqlite_path)

    db = sqlite3.connect(sqlite_path)
    db.row_factory = sqlite3.Row

    existing_version = db.execute("PRAGMA user_version").fetchone()[0]
    upgrade_database_if_needed(db, existing_version)

    return db


def upgrade_database_if_needed(db: sqlite3.Connection, existing_version: int):
    logger.debug("Existing database version: %s", existing_version)

    if existing_version >= CURRENT_DB_VERSION:
        return

    if existing_version <= 0:
        logger.info("Migrate database version 1...")
        db.execute("PRAGMA user_version=1")
        db.executescript("""
            CREATE TABLE directories (
                id INTEGER PRIMARY KEY,
                path TEXT
            );
            CREATE TABLE config_data (
                id INTEGER PRIMARY KEY,
                show_hidden_files BOOLEAN,
                sort_method TEXT,
                default_dir TEXT,
                reduce_motion BOOLEAN
            );
            INSERT INTO config_data (show_hidden_files, sort_method, default_dir, reduce_motion)
            VALUES (0, 'NAME', '', 0);
        """)
        db.commit()

    if existing_version <= 1:
        logger.info("Migrate database version 2...")
        db.execute("PRAGMA user_version=2")
        db.executescript("""
            ALTER TABLE config_data ADD COLUMN sync_offset_step FLOAT DEFAULT 0.1;
            ALTER TABLE config_data ADD COLUMN list_overscan INTEGER DEFAULT 5;
            ALTER TABLE config_data ADD COLUMN recovery_policy TEXT DEFAULT 'stay_degraded';
            ALTER TABLE config_data ADD COLUMN recursive_depth INTEGER DEFAULT 3;
        """)
        db.commit()


# -------------------------------
# DIRECTORIES (browse bookmarks)
# -------------------------------
def get_directories(db: sqlite3.Connection) -> List[str]:
    cursor = db.execute("SELECT path FROM directories ORDER BY id")
    return [row["path"] for row in cursor.fetchall()]


def set_directories(db: sqlite3.Connection, directories: List[str]):
    db.execute("DELETE FROM directories")
    for path in directories:
        db.execute("INSERT INTO directories (path) VALUES (?)", (path,))
    db.commit()


# -------------------------------
# CONFIG
# -------------------------------
def _enum_or_default(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s %r in config, using %s", enum_cls.__name__, value, default.value)
        return default


def get_config(db: sqlite3.Connection) -> Config:
    row = db.execute("""
        SELECT show_hidden_files,
               sort_method,
               default_dir,
               reduce_motion,
               sync_offset_step,
               list_overscan,
               recovery_policy,
               recursive_depth
        FROM config_data
        LIMIT 1
    """).fetchone()
    return Config(
        show_hidden_files=bool(row["show_hidden_files"]),
        sort_method=_enum_or_default(SortMethod, row["sort_method"], SortMethod.NAME),
        default_dir=row["default_dir"] or "",
        reduce_motion=bool(row["reduce_motion"]),
        sync_offset_step=float(row["sync_offset_step"]),
        list_overscan=max(0, int(row["list_overscan"])),
        recovery_policy=_enum_or_default(
            RecoveryPolicy, row["recovery_policy"], RecoveryPolicy.STAY_DEGRADED
        ),
        recursive_depth=max(0, int(row["recursive_depth"])),
    )


def set_config(db: sqlite3.Connection, config: Config):
    db.execute("""
        UPDATE config_data
        SET show_hidden_files = ?,
            sort_method = ?,
            default_dir = ?,
            reduce_motion = ?,
            sync_offset_step = ?,
            list_overscan = ?,
            recovery_policy = ?,
            recursive_depth = ?
        WHERE 1
    """, (
        config.show_hidden_files,
        config.sort_method.value,
        config.default_dir,
        config.reduce_motion,
        config.sync_offset_step,
        config.list_overscan,
        config.recovery_policy.value,
        config.recursive_depth,
    ))
    db.commit()
