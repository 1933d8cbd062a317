"""Copy text to the system clipboard through whichever CLI tool exists."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)

CLIPBOARD_COMMANDS: list[list[str]] = [
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["pbcopy"],
]

CLIPBOARD_TIMEOUT = 5.0


async def _run_copy(command: list[str], text: str) -> bool:
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        return False

    try:
        await asyncio.wait_for(process.communicate(text.encode("utf-8")), timeout=CLIPBOARD_TIMEOUT)
    except TimeoutError:
        process.kill()
        await process.wait()
        return False

    return process.returncode == 0


async def copy_to_clipboard(
    text: str, commands: list[list[str]] | None = None
) -> bool:
    """Copy *text* to the clipboard.  Returns ``True`` on success.

    Tries xclip, then xsel, then pbcopy.
    """
    for command in commands or CLIPBOARD_COMMANDS:
        if await _run_copy(command, text):
            return True
        logger.debug("Clipboard command %s failed", command[0])
    return False
