import os
import sqlite3
from .config import get_config_value


class Database:

    @staticmethod
    def connect(path):
        """Open a SQLite connection with foreign keys enforced and dict-like rows"""
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn

    @staticmethod
    def ensure_dir(path):
        """Create the parent directory of a database file if needed"""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @staticmethod
    def projects_db():
        return get_config_value('PROJECTS_DB', 'projects.db')

    @staticmethod
    def logs_db():
        return get_config_value('LOGS_DB', 'app_logs.db')

    @staticmethod
    def row_to_dict(row):
        return dict(row) if row is not None else None
