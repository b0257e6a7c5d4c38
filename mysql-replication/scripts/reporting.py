"""
Monitoring plugin output: one line on stdout, exit code from the severity
"""
import re
import sys
from replication_status import Severity

CHECK_NAME = "CheckMySQLReplicationStatus"

# Last_SQL_Error can carry a multi-line statement
_LINE_BREAKS = re.compile(r'\s*[\r\n]+\s*')


class ReportSink:
    """Emits the check result and terminates the process"""

    def __init__(self, name: str = CHECK_NAME, stream=None):
        self.name = name
        self.stream = stream

    def format(self, severity: Severity, message: str) -> str:
        return f"{self.name} {severity.name}: {_LINE_BREAKS.sub(' ', message)}"

    def emit(self, severity: Severity, message: str):
        print(self.format(severity, message), file=self.stream or sys.stdout)
        sys.exit(int(severity))
