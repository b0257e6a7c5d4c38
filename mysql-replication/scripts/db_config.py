"""
Centralized connection defaults, thresholds and credential resolution
"""
import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from replication_errors import (
    CredentialsFileNotFound,
    CredentialsFileUnreadable,
    IncompleteCredentials,
    KeyMissing,
    MalformedCredentialsFile,
    SectionMissing,
)

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306
CLIENT_SECTION = 'client'


@dataclass
class Credentials:
    """Database connection parameters"""
    host: str
    user: str
    password: str
    port: int = DEFAULT_PORT
    socket: Optional[str] = None

    @property
    def address(self) -> str:
        """Where we connect to, for log lines"""
        if self.socket:
            return f"{self.host} (socket {self.socket})"
        return f"{self.host}:{self.port}"


@dataclass
class Thresholds:
    """Replication lag thresholds in seconds"""
    warn: int = 900
    critical: int = 1800


# Connection defaults, overridden by command line flags
MYSQL_HOST = os.getenv("MYSQL_HOST")
MYSQL_PORT = int(os.getenv("MYSQL_PORT", str(DEFAULT_PORT)))
MYSQL_SOCKET = os.getenv("MYSQL_SOCKET")
MYSQL_USER = os.getenv("MYSQL_USER")
MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD")
MYSQL_INI = os.getenv("MYSQL_INI")
MYSQL_CONNECT_TIMEOUT = int(os.getenv("MYSQL_CONNECT_TIMEOUT", "10"))

# Monitoring thresholds
REPLICATION_WARN_SECONDS = int(os.getenv("REPLICATION_WARN_SECONDS", "900"))
REPLICATION_CRIT_SECONDS = int(os.getenv("REPLICATION_CRIT_SECONDS", "1800"))
NOT_SLAVE_STATUS = os.getenv("NOT_SLAVE_STATUS", "ok")

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def load_ini_credentials(path: str) -> tuple:
    """
    Read user and password from the [client] section of a my.cnf style file

    Args:
        path: Path to the ini file

    Returns:
        (user, password) tuple
    """
    if not Path(path).is_file():
        raise CredentialsFileNotFound(path)

    # my.cnf allows bare keys like skip-ssl and repeated option names
    parser = configparser.ConfigParser(
        allow_no_value=True,
        strict=False,
        interpolation=None,
    )
    try:
        with open(path, encoding="utf-8") as fh:
            parser.read_file(fh)
    except OSError as e:
        raise CredentialsFileUnreadable(path, e.strerror or str(e)) from e
    except (configparser.Error, UnicodeDecodeError) as e:
        raise MalformedCredentialsFile(path, str(e)) from e

    if not parser.has_section(CLIENT_SECTION):
        raise SectionMissing(CLIENT_SECTION)

    section = parser[CLIENT_SECTION]
    values = []
    for key in ('user', 'password'):
        if key not in section:
            raise KeyMissing(key)
        values.append(_unquote(section[key] or ''))

    logger.info(f"Loaded credentials for {values[0]!r} from {path}")
    return tuple(values)


def resolve_credentials(
    host: Optional[str],
    user: Optional[str],
    password: Optional[str],
    port: int = DEFAULT_PORT,
    socket: Optional[str] = None,
    ini_path: Optional[str] = None
) -> Credentials:
    """
    Build connection credentials from explicit values or an ini file.
    The ini file wins over explicit user/password when both are given.

    Raises:
        ResolutionError: file problems, or host/user/password left empty
    """
    if ini_path:
        if user or password:
            logger.info("Ignoring explicit user/password, using ini file")
        user, password = load_ini_credentials(ini_path)

    if not all([host, user, password]):
        raise IncompleteCredentials()

    return Credentials(
        host=host,
        user=user,
        password=password,
        port=port,
        socket=socket or None
    )
