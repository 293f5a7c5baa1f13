"""Module-level constants for the Obsidian Cortex MCP server."""

from pathlib import Path

# Configuration
CONFIG_PATH = Path(__file__).parent.parent / "cortex.yaml"
CONFIG_ENV_VAR = "OBSIDIAN_CORTEX_CONFIG"
VAULT_PATH_ENV_VAR = "OBSIDIAN_VAULT_PATH"

# Limits
MAX_FRONTMATTER_BYTES = 10_240
DEFAULT_MAX_LOG_ENTRIES = 20
SUMMARY_ITEM_LIMIT = 10
NEXT_ACTION_LIMIT = 3

# Workflow defaults (overridable via the ``workflow`` block in cortex.yaml)
DEFAULT_HOME_PATH = "Home.md"
DEFAULT_NOW_PATH = "_Context/Now.md"
DEFAULT_PROJECT_CONTEXT_PATH = "Work/Projects/AI Tools/MCP - Obsidian AI Cortex/_Context.md"
DEFAULT_SESSION_LOG_POINTER_DIR = "Work/Session End Logs"
DEFAULT_PROJECTS_DIR = "Work/Projects"
DEFAULT_PROJECT_CONTEXT_FILENAME = "_Context.md"
DEFAULT_SESSION_LOGS_DIRNAME = "Session Logs"

# Tracker document sections
TRACKER_STATE_HEADING = "Tracker State (JSON)"
TRACKER_TABLE_HEADING = "Tracker Table"
TRACKER_LOG_HEADING = "Tracker Sync Log"

# Logging
LOG_LEVEL = "INFO"
