"""Allow ``python -m obsidian_cortex``."""

from obsidian_cortex.server import run_server

run_server()
