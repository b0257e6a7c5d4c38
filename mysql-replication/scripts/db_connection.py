"""
Single-shot MySQL connection used by the replication check
"""
import pymysql
from pymysql.cursors import DictCursor
from typing import Optional
import logging
from db_config import Credentials, MYSQL_CONNECT_TIMEOUT
from replication_errors import QueryError

logger = logging.getLogger(__name__)

SLAVE_STATUS_QUERY = "SHOW SLAVE STATUS"


def to_query_error(error: pymysql.MySQLError) -> QueryError:
    """Translate a driver error into a QueryError, keeping code and message"""
    code = None
    message = str(error)
    if len(error.args) >= 2:
        code, message = error.args[0], error.args[1]
    elif len(error.args) == 1:
        message = str(error.args[0])
    state = getattr(error, 'sqlstate', None)
    return QueryError(code, message, state)


class DatabaseConnection:
    """Opens one connection, runs the status query, closes on exit"""

    def __init__(self, credentials: Credentials, connect_timeout: int = MYSQL_CONNECT_TIMEOUT):
        """
        Initialize database connection manager

        Args:
            credentials: Credentials instance
            connect_timeout: Seconds to wait for the server to accept the connection
        """
        self.credentials = credentials
        self.connect_timeout = connect_timeout
        self.conn: Optional[pymysql.connections.Connection] = None

    def __enter__(self) -> "DatabaseConnection":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def connect(self):
        """Open the connection; driver errors surface as QueryError"""
        try:
            self.conn = pymysql.connect(
                host=self.credentials.host,
                user=self.credentials.user,
                password=self.credentials.password,
                port=self.credentials.port,
                unix_socket=self.credentials.socket,
                connect_timeout=self.connect_timeout,
                cursorclass=DictCursor
            )
        except pymysql.MySQLError as e:
            logger.error(f"Connection to {self.credentials.address} failed: {e}")
            raise to_query_error(e) from e
        logger.info(f"Connected to {self.credentials.address}")

    def execute_query(self, query: str) -> list:
        """
        Execute a query and fetch every row

        Args:
            query: SQL query to execute

        Returns:
            List of results as dicts, column order preserved
        """
        if self.conn is None:
            raise RuntimeError("Connection not open. Use as a context manager.")
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(query)
                return list(cursor.fetchall())
        except pymysql.MySQLError as e:
            logger.error(f"Query execution failed: {e}")
            raise to_query_error(e) from e

    def query_status(self) -> list:
        """Rows of SHOW SLAVE STATUS; empty when the server is not a replica"""
        rows = self.execute_query(SLAVE_STATUS_QUERY)
        logger.info(f"{SLAVE_STATUS_QUERY} returned {len(rows)} row(s)")
        return rows

    def close(self):
        """Close the connection if it was opened"""
        if self.conn is not None:
            try:
                self.conn.close()
            except pymysql.MySQLError as e:
                logger.warning(f"Error closing connection: {e}")
            finally:
                self.conn = None
            logger.info("Connection closed")
