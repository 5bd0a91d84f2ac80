"""
tauri-typegen constants for Rust type recognition and TypeScript output
"""

from tauri_typegen.core.schema import BaseType


class TauriRuntime:
    """Tauri JavaScript API modules and names referenced by generated code"""

    CORE_MODULE = "@tauri-apps/api/core"
    EVENT_MODULE = "@tauri-apps/api/event"

    INVOKE_FN = "invoke"
    LISTEN_FN = "listen"
    CHANNEL_TYPE = "Channel"
    UNLISTEN_TYPE = "UnlistenFn"


class GenerationPaths:
    """Output file names, without extension"""

    TYPES = "types"
    COMMANDS = "commands"
    EVENTS = "events"
    INDEX = "index"

    DEPENDENCY_TEXT = "dependency-graph.txt"
    DEPENDENCY_DOT = "dependency-graph.dot"

    # Barrel re-export order
    INDEX_ORDER = (TYPES, COMMANDS, EVENTS)

    # Files a run may own in the output directory; anything else is left alone
    MANAGED_FILES = (f"{TYPES}.ts", f"{COMMANDS}.ts", f"{EVENTS}.ts", f"{INDEX}.ts",
                     DEPENDENCY_TEXT, DEPENDENCY_DOT)


COMMAND_ATTRIBUTES = {"tauri::command", "command"}

# Parameters supplied by the Tauri runtime rather than the caller
TAURI_INJECTED_TYPES = {
    "AppHandle",
    "Window",
    "WebviewWindow",
    "Webview",
    "State",
    "Request",
}

CHANNEL_TYPES = {"Channel"}

PRIMITIVE_TYPE_MAP = {
    "String": BaseType.STRING,
    "str": BaseType.STRING,
    "char": BaseType.STRING,
    "PathBuf": BaseType.STRING,
    "Path": BaseType.STRING,
    "bool": BaseType.BOOLEAN,
    "()": BaseType.VOID,
    **{name: BaseType.NUMBER for name in (
        "i8", "i16", "i32", "i64", "i128", "isize",
        "u8", "u16", "u32", "u64", "u128", "usize",
        "f32", "f64",
    )},
}

OPTION_TYPES = {"Option"}
ARRAY_TYPES = {"Vec", "VecDeque", "LinkedList", "HashSet", "BTreeSet", "IndexSet"}
MAP_TYPES = {"HashMap", "BTreeMap", "IndexMap"}
RESULT_TYPES = {"Result"}

# Smart pointers serialize as their contents
TRANSPARENT_TYPES = {"Box", "Rc", "Arc", "Cow", "RefCell", "Cell", "Mutex", "RwLock"}

UNKNOWN_CUSTOM = "unknown"

VALIDATION_LIBRARIES = {"zod", "schema", "none"}

AUTO_GENERATED_HEADER = """/**
 * Auto-generated by tauri-typegen from Rust commands and types - DO NOT EDIT
 * Changes will be overwritten on regeneration.
 */

"""

SKIPPED_DIRECTORIES = {"target", "node_modules", "gen"}
