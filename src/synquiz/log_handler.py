import logging

from .database import get_db_connection


class SQLiteHandler(logging.Handler):
    """Writes log records into the ``logs`` table of the game database.

    The table is created by ``database.init_db``; records emitted before that
    are reported through ``handleError`` and dropped.
    """

    def __init__(self, level=logging.INFO):
        super().__init__(level)
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    def emit(self, record):
        try:
            conn = get_db_connection()
            with conn:
                conn.execute(
                    "INSERT INTO logs (level, message) VALUES (?, ?)",
                    (record.levelname, self.format(record)),
                )
            conn.close()
        except Exception:
            self.handleError(record)
