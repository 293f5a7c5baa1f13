"""Error boundary shared by every MCP tool.

Core operations raise; tools report. ``tool_boundary`` turns the expected
failure modes (``ValueError`` and ``OSError``, which include
:class:`~obsidian_cortex.errors.InvalidPathError` and
:class:`~obsidian_cortex.errors.NoteNotFoundError`) into a
``{"success": False, "error": ...}`` payload and marks other results with
``"success": True``.

Apply it below ``@mcp.tool()`` so FastMCP registers the wrapped coroutine.
Tool modules must not use ``from __future__ import annotations``: FastMCP
resolves parameter annotations at registration time.
"""

import functools
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

ToolCoroutine = Callable[..., Awaitable[dict[str, Any]]]


def tool_boundary(tool: ToolCoroutine) -> ToolCoroutine:
    @functools.wraps(tool)
    async def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            result = await tool(*args, **kwargs)
        except (ValueError, OSError) as exc:
            logger.warning("Tool '%s' failed: %s", tool.__name__, exc)
            return {"success": False, "error": str(exc)}

        if "success" not in result:
            return {"success": True, **result}
        return result

    return wrapper
