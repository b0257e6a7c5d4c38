import pytest

import db_config
from db_config import Credentials, Thresholds, load_ini_credentials, resolve_credentials
from replication_errors import (
    CredentialsFileNotFound,
    CredentialsFileUnreadable,
    IncompleteCredentials,
    KeyMissing,
    MalformedCredentialsFile,
    ResolutionError,
    SectionMissing,
)


@pytest.fixture
def write_ini(tmp_path):
    def _write(content: str) -> str:
        path = tmp_path / "my.cnf"
        path.write_text(content)
        return str(path)
    return _write


class TestThresholds:
    def test_defaults(self) -> None:
        thresholds = Thresholds()
        assert thresholds.warn == 900
        assert thresholds.critical == 1800


class TestLoadIniCredentials:
    def test_reads_client_section(self, write_ini) -> None:
        path = write_ini("[client]\nuser=sensu\npassword=abcd1234\n")
        assert load_ini_credentials(path) == ("sensu", "abcd1234")

    def test_strips_quotes(self, write_ini) -> None:
        path = write_ini("[client]\nuser='sensu'\npassword=\"abcd1234\"\n")
        assert load_ini_credentials(path) == ("sensu", "abcd1234")

    def test_ignores_other_sections_and_bare_options(self, write_ini) -> None:
        path = write_ini(
            "# local settings\n"
            "[mysqld]\nuser=mysql\n\n"
            "[client]\nskip-ssl\nuser = monitor\npassword = s3cret\n"
        )
        assert load_ini_credentials(path) == ("monitor", "s3cret")

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(CredentialsFileNotFound):
            load_ini_credentials(str(tmp_path / "absent.cnf"))

    def test_missing_client_section(self, write_ini) -> None:
        path = write_ini("[mysqld]\nuser=mysql\n")
        with pytest.raises(SectionMissing) as exc_info:
            load_ini_credentials(path)
        assert exc_info.value.section == "client"

    def test_missing_password_key(self, write_ini) -> None:
        path = write_ini("[client]\nuser=sensu\n")
        with pytest.raises(KeyMissing) as exc_info:
            load_ini_credentials(path)
        assert exc_info.value.key == "password"

    def test_options_before_any_section(self, write_ini) -> None:
        path = write_ini("user=sensu\n[client]\npassword=x\n")
        with pytest.raises(MalformedCredentialsFile):
            load_ini_credentials(path)

    def test_invalid_utf8_is_malformed(self, tmp_path) -> None:
        path = tmp_path / "my.cnf"
        path.write_bytes(b"[client]\nuser=sensu\npassword=\xff\xfe\n")

        with pytest.raises(MalformedCredentialsFile) as exc_info:
            load_ini_credentials(str(path))
        assert exc_info.value.path == str(path)

    def test_unreadable_file_names_the_cause(self, write_ini, monkeypatch) -> None:
        path = write_ini("[client]\nuser=sensu\npassword=pw\n")

        def deny(*args, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(db_config, "open", deny, raising=False)

        with pytest.raises(CredentialsFileUnreadable, match="Permission denied"):
            load_ini_credentials(path)


class TestResolveCredentials:
    def test_explicit_values(self) -> None:
        credentials = resolve_credentials("db01", "sensu", "pw", port=3307, socket="/tmp/mysql.sock")

        assert credentials == Credentials(
            host="db01", user="sensu", password="pw", port=3307, socket="/tmp/mysql.sock"
        )

    def test_default_port(self) -> None:
        assert resolve_credentials("db01", "sensu", "pw").port == 3306

    def test_ini_file(self, write_ini) -> None:
        path = write_ini("[client]\nuser=sensu\npassword=fromfile\n")

        credentials = resolve_credentials("db01", None, None, ini_path=path)

        assert (credentials.user, credentials.password) == ("sensu", "fromfile")

    def test_ini_file_overrides_explicit_values(self, write_ini) -> None:
        path = write_ini("[client]\nuser=fileuser\npassword=filepass\n")

        credentials = resolve_credentials("db01", "cliuser", "clipass", ini_path=path)

        assert (credentials.user, credentials.password) == ("fileuser", "filepass")

    @pytest.mark.parametrize(
        "host, user, password",
        [
            (None, "sensu", "pw"),
            ("db01", None, "pw"),
            ("db01", "sensu", None),
            ("", "sensu", "pw"),
            ("db01", "", "pw"),
            ("db01", "sensu", ""),
        ],
    )
    def test_incomplete_credentials(self, host, user, password) -> None:
        with pytest.raises(IncompleteCredentials, match="Must specify host, user, password"):
            resolve_credentials(host, user, password)

    def test_empty_password_in_ini_file(self, write_ini) -> None:
        path = write_ini("[client]\nuser=sensu\npassword=\n")
        with pytest.raises(IncompleteCredentials):
            resolve_credentials("db01", None, None, ini_path=path)

    def test_missing_host_with_ini_file(self, write_ini) -> None:
        path = write_ini("[client]\nuser=sensu\npassword=pw\n")
        with pytest.raises(IncompleteCredentials):
            resolve_credentials(None, None, None, ini_path=path)

    def test_all_errors_are_resolution_errors(self, tmp_path) -> None:
        with pytest.raises(ResolutionError):
            resolve_credentials("db01", "u", "p", ini_path=str(tmp_path / "nope.cnf"))
