from pathlib import Path

from pytest import fixture
from typer.testing import CliRunner

from evermark import *
from evermark.cli.main import app

runner = CliRunner()


@fixture(autouse=True)
def clean_env(monkeypatch):
    """
    Ensure connection info isn't picked up from the environment.
    """
    for var in ["TRILIUM_HOST", "TRILIUM_TOKEN", "TRILIUM_PASSWORD"]:
        monkeypatch.delenv(var, raising=False)


@fixture
def cli_gateway(gateway, monkeypatch):
    """
    Use fake gateway in place of the configured Trilium instance.
    """
    monkeypatch.setattr(EtapiGateway, "connect", lambda *args, **kwargs: gateway)
    return gateway


def invoke(work_dir: Path, *args: str):
    return runner.invoke(app, ["--work-dir", str(work_dir), *args])


def test_init(tmp_path: Path):
    result = invoke(
        tmp_path, "init", "--host", "http://localhost:8080", "--token", "abc"
    )
    assert result.exit_code == 0, result.output

    config = Workspace(tmp_path).load_config()
    assert config.host == "http://localhost:8080"
    assert config.token == "abc"
    assert (tmp_path / "notes").is_dir()

    # refuse to overwrite
    result = invoke(
        tmp_path, "init", "--host", "http://localhost:8080", "--token", "def"
    )
    assert result.exit_code == 2
    assert Workspace(tmp_path).load_config().token == "abc"

    result = invoke(
        tmp_path,
        "init",
        "--host",
        "http://localhost:8080",
        "--token",
        "def",
        "--force",
    )
    assert result.exit_code == 0, result.output
    assert Workspace(tmp_path).load_config().token == "def"


def test_init_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TRILIUM_HOST", "http://trilium:8080")
    monkeypatch.setenv("TRILIUM_PASSWORD", "secret")

    result = invoke(tmp_path, "init")
    assert result.exit_code == 0, result.output

    config = Workspace(tmp_path).load_config()
    assert config.host == "http://trilium:8080"
    assert config.password == "secret"


def test_init_missing_params(tmp_path: Path):
    result = invoke(tmp_path, "init", "--token", "abc")
    assert result.exit_code == 2

    result = invoke(tmp_path, "init", "--host", "http://localhost:8080")
    assert result.exit_code == 2

    assert not (tmp_path / CONFIG_FILENAME).exists()


def test_new(workspace: Workspace):
    result = invoke(workspace.root, "new", "Sprint Plan")
    assert result.exit_code == 0, result.output

    path = workspace.notes_dir / "Sprint Plan.md"
    assert path.read_text() == "# Sprint Plan\n"


def test_new_no_workspace(tmp_path: Path):
    result = invoke(tmp_path, "new", "Sprint Plan")
    assert result.exit_code == 1


def test_publish_unpublish(workspace: Workspace, cli_gateway):
    path_1 = workspace.notes_dir / "a.md"
    path_2 = workspace.notes_dir / "b.md"
    path_1.write_text("# A\n")
    path_2.write_text("# B\n\n@(Work)[x]\n")

    result = invoke(workspace.root, "publish", str(path_1), str(path_2))
    assert result.exit_code == 0, result.output
    assert cli_gateway.count("create_note") == 2

    store = MappingStore.load(workspace.store_path)
    assert [r.path for r in store.records] == ["notes/a.md", "notes/b.md"]

    result = invoke(workspace.root, "publish", str(path_1))
    assert result.exit_code == 0, result.output
    assert cli_gateway.count("update_note") == 1

    result = invoke(workspace.root, "unpublish", str(path_1))
    assert result.exit_code == 0, result.output
    assert cli_gateway.count("delete_note") == 1

    store = MappingStore.load(workspace.store_path)
    assert [r.path for r in store.records] == ["notes/b.md"]


def test_unpublish_not_published(workspace: Workspace, cli_gateway):
    path = workspace.notes_dir / "a.md"
    path.write_text("# A\n")

    result = invoke(workspace.root, "unpublish", str(path))

    assert result.exit_code == 1
    assert cli_gateway.calls == []


def test_publish_connect_error(workspace: Workspace, monkeypatch):
    """
    Connection failures are reported without a traceback.
    """

    def connect(*args, **kwargs):
        raise ConnectError("Failed to connect to Trilium host='http://localhost:8080'")

    monkeypatch.setattr(EtapiGateway, "connect", connect)

    path = workspace.notes_dir / "a.md"
    path.write_text("# A\n")

    result = invoke(workspace.root, "publish", str(path))

    assert result.exit_code == 1
    assert not isinstance(result.exception, ConnectError)
    assert MappingStore.load(workspace.store_path).records == []
