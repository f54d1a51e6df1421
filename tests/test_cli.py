import gzip

from typer.testing import CliRunner

from sentry_forwarder.cli import app

runner = CliRunner()


def test_check(config_file):
    result = runner.invoke(app, ["check", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "https://OLDKEY@host1/123 -> https://NEWKEY@host2/456: ok" in result.output


def test_check_flags_unroutable(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("dsn_mapping:\n  - old: https://host1/1\n    new: https://N@h/2\n")

    result = runner.invoke(app, ["check", "--config", str(path)])

    assert result.exit_code == 0
    assert "UNROUTABLE" in result.output


def test_check_missing_config(tmp_path):
    result = runner.invoke(app, ["check", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1


def test_rewrite_plain(config_file):
    result = runner.invoke(
        app,
        ["rewrite", "--key", "OLDKEY", "--plain"],
        input='{"dsn":"https:\\/\\/OLDKEY@host1\\/123"}\n',
    )

    assert result.exit_code == 0
    assert result.stdout == '{"dsn":"https:\\/\\/NEWKEY@host2\\/456"}\n'


def test_rewrite_gzip(config_file):
    result = runner.invoke(
        app,
        ["rewrite", "--key", "OLDKEY"],
        input=gzip.compress(b"sentry_key=OLDKEY"),
    )

    assert result.exit_code == 0
    assert gzip.decompress(result.stdout_bytes) == b"sentry_key=NEWKEY"


def test_rewrite_unknown_key(config_file):
    result = runner.invoke(app, ["rewrite", "--key", "NOPE", "--plain"], input="x")
    assert result.exit_code == 1


def test_rewrite_not_gzip(config_file):
    result = runner.invoke(app, ["rewrite", "--key", "OLDKEY"], input=b"plain text")
    assert result.exit_code == 1
