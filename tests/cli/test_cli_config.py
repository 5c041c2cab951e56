import json

from nowpost.cli import main
from tests.utils import logger_to_stderr


def test_config_check_json_success(capsys, tmp_path):
    config_text = """
logging_level = "DEBUG"

[repository]
owner = "someone"
name = "homepage"

[publishing]
content_dir = "img"
document_path = "now/index.html"

[session]
store = "file"
credential_path = "token"
"""
    config_file = tmp_path / "config.toml"
    config_file.write_text(config_text)

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check", "--format", "json"])

    assert exit_code == 0

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["status"] == "ok"
    assert payload["warnings"] == []
    assert payload["config_path"].endswith("config.toml")


def test_config_check_reports_warnings(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text('[publishing]\ncontent_dir = "now"\n\n[web]\nenabled = true\n')

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Images are stored next to the Now page document" in captured.err
    assert "without header token authentication" in captured.err


def test_config_check_missing_file(capsys, tmp_path):
    missing_path = tmp_path / "absent.toml"

    with logger_to_stderr():
        exit_code = main(["--config", str(missing_path), "config", "check"])

    assert exit_code == 2

    captured = capsys.readouterr()
    assert "Configuration error (missing_file" in captured.err
    assert str(missing_path) in captured.err


def test_config_check_validation_error(capsys, tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("unknown_field = 42\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 3

    captured = capsys.readouterr()
    assert "validation_error" in captured.err
    assert "Extra inputs are not permitted" in captured.err


def test_config_check_invalid_toml(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[repository\n")

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 1


def test_config_explain_text_output(capsys):
    with logger_to_stderr():
        exit_code = main(["config", "explain"])

    assert exit_code == 0

    captured = capsys.readouterr()
    assert "Configuration schema" in captured.err
    assert "publishing.document_path" in captured.err
    assert "web.auth.header_name" in captured.err


def test_config_explain_json_output(capsys):
    exit_code = main(["config", "explain", "--format", "json"])

    assert exit_code == 0
    fields = {field["name"]: field for field in json.loads(capsys.readouterr().out)}
    assert fields["publishing.content_dir"]["default"] == "docs"
    assert fields["repository.timeout"]["type"] == "Optional[float]"


def test_config_check_warns_about_unresolvable_console_token(capsys, tmp_path, monkeypatch):
    monkeypatch.delenv("NOWPOST_CONSOLE_TOKEN", raising=False)
    config_file = tmp_path / "config.toml"
    config_file.write_text('[web.auth]\nenabled = true\ntoken = "env:NOWPOST_CONSOLE_TOKEN"\n')

    with logger_to_stderr():
        exit_code = main(["--config", str(config_file), "config", "check"])

    assert exit_code == 0
    assert "'web.auth.token' cannot be resolved" in capsys.readouterr().err
