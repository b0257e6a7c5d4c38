"""
Checks MySQL replication status for a monitoring system
Exits 0/1/2/3 for OK/WARNING/CRITICAL/UNKNOWN with a one-line summary

Credentials can come from a my.cnf style file instead of the command line:

    check_replication.py -h db01 --ini /etc/sensu/my.cnf

    [client]
    user=sensu
    password="abcd1234"
"""
import argparse
import logging
from typing import Callable, Optional
import db_config
from db_config import Thresholds, resolve_credentials
from db_connection import DatabaseConnection
from replication_errors import QueryError, ResolutionError
from replication_status import CheckResult, ReplicationEvaluator, Severity
from reporting import ReportSink

logger = logging.getLogger(__name__)


def not_slave_status(value: str) -> Severity:
    try:
        return Severity.from_name(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    # -h is the host, so help is only available as --help
    parser = argparse.ArgumentParser(
        description="Check MySQL replication status",
        add_help=False
    )
    parser.add_argument("-h", "--host", default=db_config.MYSQL_HOST,
                        help="Database host")
    parser.add_argument("-P", "--port", type=int, default=db_config.MYSQL_PORT,
                        help="Database port (default: 3306)")
    parser.add_argument("-s", "--socket", default=db_config.MYSQL_SOCKET,
                        help="Socket to use")
    parser.add_argument("-u", "--username", dest="user", default=db_config.MYSQL_USER,
                        help="Database username")
    parser.add_argument("-p", "--password", default=db_config.MYSQL_PASSWORD,
                        help="Database password")
    parser.add_argument("-i", "--ini", default=db_config.MYSQL_INI,
                        help="My.cnf ini file with a [client] section")
    parser.add_argument("-w", "--warning", dest="warn", type=int,
                        default=db_config.REPLICATION_WARN_SECONDS,
                        help="Warning threshold for replication lag (default: 900)")
    parser.add_argument("-c", "--critical", dest="crit", type=int,
                        default=db_config.REPLICATION_CRIT_SECONDS,
                        help="Critical threshold for replication lag (default: 1800)")
    parser.add_argument("-n", "--not-slave", dest="not_slave", type=not_slave_status,
                        default=db_config.NOT_SLAVE_STATUS,
                        help="Exit status to use if not a slave (default: ok)")
    parser.add_argument("--help", action="help",
                        help="Show this help message and exit")
    return parser


def run_check(
    args: argparse.Namespace,
    connection_factory: Optional[Callable[..., DatabaseConnection]] = None
) -> CheckResult:
    """Resolve credentials, query the server and evaluate its slave status"""
    connection_factory = connection_factory or DatabaseConnection
    try:
        credentials = resolve_credentials(
            host=args.host,
            user=args.user,
            password=args.password,
            port=args.port,
            socket=args.socket,
            ini_path=args.ini
        )
    except ResolutionError as e:
        logger.error(f"Credential resolution failed: {e}")
        return CheckResult(Severity.UNKNOWN, str(e))

    evaluator = ReplicationEvaluator(
        Thresholds(warn=args.warn, critical=args.crit),
        not_slave_severity=args.not_slave
    )

    try:
        with connection_factory(credentials) as db:
            return evaluator.evaluate(db.query_status())
    except QueryError as e:
        return CheckResult(Severity.CRITICAL, str(e))
    except Exception as e:
        logger.exception("Replication check failed")
        return CheckResult(Severity.CRITICAL, str(e))


def main(argv: Optional[list] = None, sink: Optional[ReportSink] = None):
    logging.basicConfig(
        level=db_config.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args = build_parser().parse_args(argv)
    result = run_check(args)
    (sink or ReportSink()).emit(result.severity, result.message)


if __name__ == "__main__":
    main()
