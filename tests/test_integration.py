"""
End-to-end tests for generate() and the tauri-typegen command line
"""

import json
import textwrap

import pytest

import tauri_typegen
from tauri_typegen.cli import main
from tauri_typegen.core.config import GenerateConfig
from tauri_typegen.core.errors import PathNotFound, UnknownValidationLibrary


GREETER_RS = """
use tauri::Emitter;

#[derive(Clone, Serialize, Deserialize)]
pub struct Greeting {
    pub message: String,
    pub sent_at: u64,
}

#[tauri::command]
pub fn greet(app: tauri::AppHandle, name: String) -> Greeting {
    let greeting = Greeting { message: format!("Hello, {}!", name), sent_at: 0 };
    app.emit("greeted", greeting.clone()).unwrap();
    greeting
}
"""


@pytest.fixture
def tauri_project(tmp_path, monkeypatch):
    """A throwaway Tauri app with a src-tauri crate, used as the working directory."""
    src = tmp_path / "src-tauri" / "src"
    src.mkdir(parents=True)
    (src / "lib.rs").write_text(textwrap.dedent(GREETER_RS))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_generate_writes_files(tauri_project):
    """Test that generate() writes every output file below output_path"""
    result = tauri_typegen.generate(GenerateConfig(validation_library="zod"))

    output_dir = tauri_project / "src" / "generated"
    assert sorted(path.name for path in result.files) == ["commands.ts", "events.ts", "index.ts", "types.ts"]
    assert all(path.exists() for path in result.files)

    assert "export const GreetingSchema = z.object({" in (output_dir / "types.ts").read_text()
    assert "export async function greet(params: types.GreetParams): Promise<types.Greeting>" in (
        output_dir / "commands.ts").read_text()
    assert "export async function onGreeted(" in (output_dir / "events.ts").read_text()

    assert [command.name for command in result.model.commands] == ["greet"]
    assert result.diagnostics == []


def test_generate_visualize_deps(tauri_project):
    """Test that dependency graph files are written on request"""
    result = tauri_typegen.generate(GenerateConfig(output_path="out", visualize_deps=True))
    names = {path.name for path in result.files}
    assert {"dependency-graph.txt", "dependency-graph.dot"} <= names
    assert (tauri_project / "out" / "dependency-graph.dot").read_text().startswith("digraph")


def test_generate_removes_stale_files(tauri_project):
    """Test that files the current run no longer emits are removed from the output directory"""
    output_dir = tauri_project / "src" / "generated"
    tauri_typegen.generate(GenerateConfig(visualize_deps=True))
    assert (output_dir / "events.ts").exists()
    assert (output_dir / "dependency-graph.dot").exists()

    # Unmanaged files in the output directory are left alone
    (output_dir / "custom.ts").write_text("export const keep = true;\n")

    lib_rs = tauri_project / "src-tauri" / "src" / "lib.rs"
    lib_rs.write_text(lib_rs.read_text().replace('app.emit("greeted", greeting.clone()).unwrap();', ""))
    result = tauri_typegen.generate(GenerateConfig())

    assert result.model.events == []
    assert sorted(path.name for path in output_dir.iterdir()) == [
        "commands.ts", "custom.ts", "index.ts", "types.ts",
    ]
    assert "events" not in (output_dir / "index.ts").read_text()


def test_generate_errors(tauri_project):
    """Test that fatal errors are raised before anything is written"""
    with pytest.raises(PathNotFound):
        tauri_typegen.generate(GenerateConfig(project_path="./missing"))

    with pytest.raises(UnknownValidationLibrary):
        tauri_typegen.generate(GenerateConfig(validation_library="yup"))

    config = GenerateConfig()
    config.validation_library = "yup"
    with pytest.raises(UnknownValidationLibrary):
        tauri_typegen.generate(config)

    assert not (tauri_project / "src" / "generated").exists()


def test_generate_unresolved_type_writes_nothing(tauri_project):
    """Test that an unresolved custom type aborts before the write phase"""
    (tauri_project / "src-tauri" / "src" / "extra.rs").write_text(
        "#[tauri::command]\npub fn load() -> Missing { todo!() }\n"
    )
    with pytest.raises(tauri_typegen.UnresolvedCustomType):
        tauri_typegen.generate()
    assert not (tauri_project / "src" / "generated").exists()


def test_analyze_only(tauri_project):
    """Test analysis without generation"""
    model = tauri_typegen.analyze("src-tauri")
    assert model.emitted_types == ["Greeting"]
    assert [event.name for event in model.events] == ["greeted"]


# === CLI === #

def test_cli_generate(tauri_project, capsys):
    """Test the generate subcommand with explicit flags"""
    exit_code = main(["generate", "-p", "src-tauri", "-o", "bindings", "-v", "zod"])
    assert exit_code == 0
    assert "wrote 4 files" in capsys.readouterr().out
    assert "safeParse" in (tauri_project / "bindings" / "commands.ts").read_text()


def test_cli_generate_uses_config_file(tauri_project):
    """Test that typegen.json is discovered and flags override it"""
    (tauri_project / "typegen.json").write_text(json.dumps({
        "project_path": "./src-tauri",
        "output_path": "./from-config",
        "validation_library": "zod",
    }))
    assert main(["generate"]) == 0
    assert "z.infer" in (tauri_project / "from-config" / "types.ts").read_text()

    assert main(["generate", "-v", "none"]) == 0
    assert "z.infer" not in (tauri_project / "from-config" / "types.ts").read_text()


def test_cli_generate_uses_tauri_conf(tauri_project):
    """Test that the plugins.typegen section of tauri.conf.json is used"""
    (tauri_project / "src-tauri" / "tauri.conf.json").write_text(json.dumps({
        "productName": "greeter",
        "plugins": {"typegen": {"outputPath": "./src/api", "validationLibrary": "zod"}},
    }))
    assert main(["generate"]) == 0
    assert (tauri_project / "src" / "api" / "types.ts").exists()


def test_cli_exit_codes(tauri_project, capsys):
    """Test exit status 1 for tool errors and 2 for argument errors"""
    assert main(["generate", "-p", "nowhere"]) == 1
    assert "error: Project path does not exist: nowhere" in capsys.readouterr().err

    assert main(["generate", "-v", "yup"]) == 1
    assert "Unknown validation library 'yup'" in capsys.readouterr().err

    assert main(["generate", "-c", "absent.json"]) == 1
    assert "error: Config file not found" in capsys.readouterr().err

    with pytest.raises(SystemExit) as exc_info:
        main(["generate", "--no-such-flag"])
    assert exc_info.value.code == 2

    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 2


def test_cli_zero_commands_is_success(tmp_path, monkeypatch):
    """Test that a project without commands still generates and exits 0"""
    src = tmp_path / "src-tauri" / "src"
    src.mkdir(parents=True)
    (src / "main.rs").write_text("fn main() {}\n")
    monkeypatch.chdir(tmp_path)

    assert main(["generate"]) == 0
    generated = tmp_path / "src" / "generated"
    assert sorted(path.name for path in generated.iterdir()) == ["index.ts", "types.ts"]


def test_cli_init(tmp_path, monkeypatch, capsys):
    """Test that init writes default configuration and refuses to overwrite"""
    monkeypatch.chdir(tmp_path)

    assert main(["init"]) == 0
    config = json.loads((tmp_path / "typegen.json").read_text())
    assert config["project_path"] == "./src-tauri"
    assert config["validation_library"] == "none"

    assert main(["init"]) == 1
    assert "already exists" in capsys.readouterr().err

    assert main(["init", "--force"]) == 0
    assert main(["init", "custom/typegen.json"]) == 0
    assert (tmp_path / "custom" / "typegen.json").exists()
