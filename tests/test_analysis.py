"""
Analysis tests: command, struct and event extraction plus type closure
"""

import textwrap

import pytest

from tauri_typegen.analysis.analyzer import CommandAnalyzer
from tauri_typegen.analysis.attributes import parse_serde_attributes, parse_validation, command_rename_all
from tauri_typegen.analysis.commands import extract_commands, is_tauri_injected
from tauri_typegen.analysis.dependency_graph import DependencyGraph
from tauri_typegen.analysis.events import extract_events
from tauri_typegen.analysis.parser import RustSourceParser
from tauri_typegen.analysis.structs import extract_structs
from tauri_typegen.core.errors import FileParseFailure, PathNotFound
from tauri_typegen.core.schema import BaseType, TypeKind, VariantShape, UNKNOWN_TYPE


def _parse(source: str):
    return RustSourceParser().parse_source(textwrap.dedent(source))


def _write_project(root, files):
    for relative_path, source in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
    return root


ORDERS_RS = """
use serde::{Deserialize, Serialize};
use tauri::{AppHandle, Emitter, State};

#[derive(Debug, Serialize, Deserialize)]
pub struct Order {
    pub id: u32,
    pub items: Vec<LineItem>,
    pub status: OrderStatus,
    pub note: Option<String>,
}

#[derive(Debug, Serialize, Deserialize)]
pub struct LineItem {
    pub sku: String,
    pub quantity: u32,
}

#[derive(Debug, Serialize, Deserialize)]
pub enum OrderStatus {
    Pending,
    Shipped,
    Delivered,
}

#[derive(Debug, Serialize, Deserialize)]
pub struct Unused {
    pub value: i64,
}

#[tauri::command]
pub async fn get_order(order_id: u32, state: State<'_, AppState>) -> Result<Order, String> {
    Err("not found".to_string())
}

#[tauri::command(rename_all = "snake_case")]
pub fn update_order_status(app: AppHandle, order_id: u32, new_status: OrderStatus) -> Result<(), String> {
    app.emit("order-updated", OrderUpdated { order_id, status: new_status }).unwrap();
    Ok(())
}

#[derive(Clone, Serialize)]
pub struct OrderUpdated {
    pub order_id: u32,
    pub status: OrderStatus,
}
"""


def test_extract_commands():
    """Test command discovery, injected parameter removal and return types"""
    commands = extract_commands(_parse(ORDERS_RS))
    assert [command.name for command in commands] == ["get_order", "update_order_status"]

    get_order, update_status = commands
    assert get_order.is_async
    assert [param.name for param in get_order.parameters] == ["order_id"]
    assert get_order.parameters[0].type.is_primitive(BaseType.NUMBER)
    assert str(get_order.return_type) == "Result[Order]"
    assert get_order.line_number > 1

    assert not update_status.is_async
    assert update_status.rename_all == "snake_case"
    assert [param.name for param in update_status.parameters] == ["order_id", "new_status"]
    assert str(update_status.return_type) == "Result[void]"


def test_command_variants():
    """Test bare #[command], optional parameters, channels and commands inside modules"""
    source = """
    use tauri::command;
    use tauri::ipc::Channel;

    #[command]
    fn ping() {}

    mod downloads {
        #[tauri::command]
        pub async fn download(url: String, retries: Option<u8>, on_progress: Channel<Progress>, window: tauri::Window) {}
    }

    fn helper(value: String) -> String { value }
    """
    commands = extract_commands(_parse(source))
    assert [command.name for command in commands] == ["ping", "download"]

    ping, download = commands
    assert ping.parameters == []
    assert ping.return_type.is_primitive(BaseType.VOID)
    assert not ping.has_arguments

    assert [param.name for param in download.parameters] == ["url", "retries"]
    retries = download.parameters[1]
    assert retries.is_optional
    assert retries.type.is_primitive(BaseType.NUMBER)

    assert len(download.channels) == 1
    assert download.channels[0].name == "on_progress"
    assert str(download.channels[0].message_type) == "Progress"
    assert download.has_arguments
    assert download.get_referenced_types() == {"Progress"}


def test_injected_parameter_detection():
    """Test recognition of runtime-provided parameter types"""
    for raw_type in ["AppHandle", "tauri::AppHandle", "State<'_, AppState>", "tauri::State<Db>",
                     "Window", "WebviewWindow", "tauri::Webview"]:
        assert is_tauri_injected(raw_type), raw_type
    for raw_type in ["String", "AppConfig", "Vec<Window2>"]:
        assert not is_tauri_injected(raw_type), raw_type


def test_extract_structs_and_enums():
    """Test struct fields, serde renames, skipped fields and enum variant shapes"""
    source = """
    #[derive(Serialize, Deserialize)]
    #[serde(rename_all = "camelCase")]
    pub struct UserProfile {
        pub user_id: u64,
        #[serde(rename = "displayName")]
        pub name: String,
        #[serde(skip)]
        pub cache: Vec<u8>,
        avatar: Option<String>,
    }

    #[derive(Serialize)]
    #[serde(rename_all = "kebab-case")]
    pub enum Shape {
        Empty,
        Circle(f64),
        Point(i32, i32),
        Rect { width: f64, height: f64 },
        #[serde(rename = "custom")]
        Other,
    }

    pub struct Meters(pub f64);

    pub struct Span(u32, crate::geo::Point);

    pub struct Marker;
    """
    declarations = {declaration.name: declaration for declaration in extract_structs(_parse(source))}
    assert set(declarations) == {"UserProfile", "Shape", "Meters", "Span", "Marker"}

    profile = declarations["UserProfile"]
    assert not profile.is_enum
    assert profile.rename_all == "camelCase"
    assert [field.name for field in profile.fields] == ["user_id", "name", "avatar"]
    assert profile.fields[1].rename == "displayName"
    assert profile.fields[0].is_public
    assert not profile.fields[2].is_public
    assert profile.fields[2].is_optional
    assert profile.fields[2].type.is_primitive(BaseType.STRING)

    shape = declarations["Shape"]
    assert shape.is_enum
    assert not shape.is_unit_enum
    assert shape.rename_all == "kebab-case"
    assert [variant.shape for variant in shape.variants] == [
        VariantShape.UNIT, VariantShape.NEWTYPE, VariantShape.TUPLE, VariantShape.STRUCT, VariantShape.UNIT,
    ]
    assert [field.name for field in shape.variants[3].fields] == ["width", "height"]
    assert shape.variants[4].rename == "custom"

    # Unnamed fields keep their payload instead of becoming an empty object
    meters = declarations["Meters"]
    assert meters.fields == []
    assert meters.shape == VariantShape.NEWTYPE
    assert meters.is_alias_struct
    assert [str(t) for t in meters.types] == ["number"]

    span = declarations["Span"]
    assert span.shape == VariantShape.TUPLE
    assert [str(t) for t in span.types] == ["number", "Point"]
    assert span.get_referenced_types() == {"Point"}

    marker = declarations["Marker"]
    assert marker.shape == VariantShape.UNIT
    assert marker.types == []

    assert not profile.is_alias_struct
    assert not shape.is_alias_struct


def test_raw_identifier_parameters():
    """Test that r#-prefixed parameters keep their unprefixed name"""
    commands = extract_commands(_parse("""
    #[tauri::command]
    fn filter(r#type: String, mut kind: u8, r#in: Vec<String>) {}
    """))
    assert [param.name for param in commands[0].parameters] == ["type", "kind", "in"]


def test_validation_attributes():
    """Test parsing of #[validate(...)] constraints"""
    test_cases = [
        ('validate(length(min = 1, max = 50))', {"min_length": 1, "max_length": 50}),
        ('validate(email)', {"email": True}),
        ('validate(url, length(max = 2048))', {"url": True, "max_length": 2048}),
        ('validate(range(min = 0, max = 150))', {"min_value": 0, "max_value": 150}),
        ('validate(range(min = 0.5))', {"min_value": 0.5}),
        ('validate(length(equal = 6))', {"min_length": 6, "max_length": 6}),
        ('validate(length(min = 3, message = "too short"))', {"min_length": 3, "message": "too short"}),
    ]

    for attribute, expected in test_cases:
        constraints = parse_validation([attribute])
        for key, value in expected.items():
            assert getattr(constraints, key) == value, (attribute, key)

    assert parse_validation(['serde(rename = "x")']) is None
    assert parse_validation(['validate(custom(function = "check"))']) is None


def test_serde_and_command_attributes():
    """Test serde rename parsing and command-level rename_all sources"""
    serde = parse_serde_attributes(['derive(Serialize)', 'serde(rename = "id", skip_serializing_if = "Option::is_none")'])
    assert serde.rename == "id"
    assert not serde.skip

    directional = parse_serde_attributes(['serde(rename(serialize = "out", deserialize = "in"))'])
    assert directional.rename == "out"

    assert command_rename_all(['tauri::command(rename_all = "snake_case")']) == "snake_case"
    assert command_rename_all(['tauri::command', 'serde(rename_all = "camelCase")']) == "camelCase"
    assert command_rename_all(['tauri::command']) is None


def test_extract_events():
    """Test event discovery and payload inference"""
    source = """
    fn notify(app: AppHandle, update: StatusUpdate, count: u32) {
        app.emit("status-update", update.clone()).unwrap();
        app.emit("count-changed", count)?;
        app.emit("message", format!("{} items", count)).unwrap();
        let ready = true;
        app.emit_to("main", "ready", ready).unwrap();
        app.emit("progress", Progress { percent: 10 }).unwrap();
        app.emit("opaque", compute()).unwrap();
        let name = "dynamic";
        app.emit(name, ()).unwrap();
    }
    """
    events, diagnostics = extract_events(_parse(source))
    payloads = {event.name: str(event.payload_type) for event in events}
    assert payloads == {
        "status-update": "StatusUpdate",
        "count-changed": "number",
        "message": "string",
        "ready": "boolean",
        "progress": "Progress",
        "opaque": "unknown",
    }

    assert len(diagnostics) == 1
    assert "non-literal event name" in diagnostics[0].message


def test_parse_failure_raises():
    """Test that syntax errors raise FileParseFailure with a line number"""
    with pytest.raises(FileParseFailure) as exc_info:
        _parse("""
        #[tauri::command]
        fn broken(x: String -> String {
        """)
    assert exc_info.value.line_number is not None


# === PROJECT ANALYSIS === #

def test_analyze_project(tmp_path):
    """Test whole-project analysis and the type closure"""
    _write_project(tmp_path, {"src/orders.rs": ORDERS_RS})
    model = CommandAnalyzer().analyze_project(tmp_path)

    assert [command.name for command in model.commands] == ["get_order", "update_order_status"]
    assert "Unused" in model.structs
    assert set(model.emitted_types) == {"Order", "LineItem", "OrderStatus", "OrderUpdated"}
    assert model.unresolved_types == {}

    assert len(model.events) == 1
    assert model.events[0].name == "order-updated"
    assert str(model.events[0].payload_type) == "OrderUpdated"


def test_analyze_project_recovers_from_parse_failures(tmp_path):
    """Test that a broken file becomes a diagnostic while the rest is analyzed"""
    _write_project(tmp_path, {
        "src/lib.rs": """
        #[tauri::command]
        fn greet(name: String) -> String {
            format!("Hello, {}!", name)
        }
        """,
        "src/broken.rs": "fn oops( {",
        "target/debug/generated.rs": "#[tauri::command] fn ignored() {}",
    })
    model = CommandAnalyzer().analyze_project(tmp_path)

    assert [command.name for command in model.commands] == ["greet"]
    assert len(model.diagnostics) == 1
    assert "broken.rs" in str(model.diagnostics[0])


def test_analyze_project_unresolved_types(tmp_path):
    """Test that undeclared types are recorded with their referrers"""
    _write_project(tmp_path, {"src/lib.rs": """
    #[tauri::command]
    fn load_report(id: u32) -> Report { todo!() }

    pub struct Report {
        pub author: Person,
        pub created: DateTime,
    }
    """})

    model = CommandAnalyzer().analyze_project(tmp_path)
    assert model.emitted_types == ["Report"]
    assert model.unresolved_types == {"DateTime": {"Report"}, "Person": {"Report"}}

    mapped = CommandAnalyzer(type_mappings={"DateTime": "string"}).analyze_project(tmp_path)
    assert set(mapped.unresolved_types) == {"Person"}


def test_analyze_project_event_payloads(tmp_path):
    """Test event de-duplication and undeclared payload demotion"""
    _write_project(tmp_path, {"src/lib.rs": """
    fn first(app: AppHandle, value: Mystery) {
        app.emit("tick", value).unwrap();
        app.emit("tick", 5).unwrap();
        app.emit("ghost", Ghost { id: 1 }).unwrap();
    }
    """})

    model = CommandAnalyzer().analyze_project(tmp_path)
    payloads = {event.name: event.payload_type for event in model.events}
    assert payloads["tick"] == UNKNOWN_TYPE
    assert payloads["ghost"] == UNKNOWN_TYPE
    assert model.unresolved_types == {}


def test_analyze_missing_project(tmp_path):
    """Test that a missing project path raises PathNotFound"""
    with pytest.raises(PathNotFound):
        CommandAnalyzer().analyze_project(tmp_path / "does-not-exist")


def test_duplicate_commands_first_wins(tmp_path):
    """Test that a command name declared twice keeps the first declaration"""
    _write_project(tmp_path, {
        "src/a.rs": "#[tauri::command]\nfn save(value: String) {}\n",
        "src/b.rs": "#[tauri::command]\nfn save(value: u32) {}\n",
    })
    model = CommandAnalyzer().analyze_project(tmp_path)
    assert len(model.commands) == 1
    assert model.commands[0].parameters[0].type.is_primitive(BaseType.STRING)
    assert any("Duplicate command" in diagnostic.message for diagnostic in model.diagnostics)


def test_dependency_graph(tmp_path):
    """Test text and DOT rendering of the dependency graph"""
    _write_project(tmp_path, {"src/orders.rs": ORDERS_RS})
    model = CommandAnalyzer().analyze_project(tmp_path)
    graph = DependencyGraph.from_model(model)

    assert graph.command_types["get_order"] == ["LineItem", "Order", "OrderStatus"]
    assert graph.type_dependencies["Order"] == {"LineItem", "OrderStatus"}

    text = graph.to_text()
    assert "get_order" in text
    assert "LineItem" in text

    dot = graph.to_dot()
    assert dot.startswith("digraph")
    assert '"Order" -> "LineItem"' in dot
    assert dot.rstrip().endswith("}")


def test_map_types_in_model(tmp_path):
    """Test that channel message types and nested wrappers reach the model"""
    _write_project(tmp_path, {"src/lib.rs": """
    #[tauri::command]
    async fn sync_all(lookup: HashMap<String, Vec<Item>>, on_event: Channel<SyncEvent>) -> Vec<(String, u32)> {
        vec![]
    }

    pub struct Item { pub name: String }

    pub enum SyncEvent { Started, Finished { count: u32 } }
    """})
    model = CommandAnalyzer().analyze_project(tmp_path)
    command = model.commands[0]
    assert command.parameters[0].type.kind == TypeKind.MAP
    assert command.return_type.kind == TypeKind.ARRAY
    assert set(model.emitted_types) == {"Item", "SyncEvent"}
