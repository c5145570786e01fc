from typer.testing import CliRunner
from mdpost.cli.cli import app

def test_cli_smoke():
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("show", "render", "set", "normalize", "validate", "new", "describe", "add-image"):
        assert command in result.output
