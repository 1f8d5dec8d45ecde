"""Help menu text shown in the lower panel of the help context."""

from __future__ import annotations

_KEY = "\033[1m"
_RESET = "\033[0m"


def _row(keys: str, description: str) -> str:
    return f"{_KEY}{keys}{_RESET} - {description}"


HELP_LINES: tuple[str, ...] = (
    "(General Commands)",
    _row("<C-t>", "Toggle terminal window"),
    _row("<C-h>", "Toggle help menu window"),
    _row("<C-r>", "Rescan CWD for updates"),
    _row("<C-n>", "Cycle color scheme"),
    _row("<C-p>", "Toggle preview window"),
    _row("Esc  ", "Exit Vuit"),
    "",
    "(File List Focus Commands)",
    _row("Up/Down, <C-j>/<C-k>", "Navigate the focused list"),
    _row("Enter", "Open selected file"),
    _row("Tab  ", "Switch between recent, file and match windows"),
    _row("<C-x>", "Remove recent file, or run the selected file in the terminal"),
    _row("<C-f>", "Toggle string search across the listed files"),
    "",
    "(String Search Commands)",
    _row("Enter", "Search for the typed string, or open the selected match"),
    _row("<C-r>", "Replace the searched string in every match"),
    "",
    "(Terminal Focus Commands)",
    _row("<C-t>", "Switches focus back to the file list, but terminal session is preserved"),
    _row("<C-c>", "Interrupt the running command"),
    _row("quit, exit", "Switches focus back to the file list and restarts the terminal instance"),
    _row("restart, clear", "If terminal seems unresponsive, this will restart the session"),
)


def help_lines() -> list[str]:
    return list(HELP_LINES)
