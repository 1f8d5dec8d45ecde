"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens
(``"CTRL_P"``, ``"ENTER"``, ``"UP"``, ...). Plain characters come back as
themselves.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x06": "CTRL_F",
    b"\x08": "CTRL_H",
    b"\t": "TAB",
    b"\n": "CTRL_J",
    b"\x0b": "CTRL_K",
    b"\r": "ENTER",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\x12": "CTRL_R",
    b"\x14": "CTRL_T",
    b"\x18": "CTRL_X",
    b"\x7f": "BACKSPACE",
}

_ARROW_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, lead: bytes) -> bytes:
    lead_value = lead[0]
    if lead_value >= 0xF0:
        missing = 3
    elif lead_value >= 0xE0:
        missing = 2
    elif lead_value >= 0xC0:
        missing = 1
    else:
        return lead
    data = lead
    for _ in range(missing):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when ``timeout_ms`` elapses first."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch).decode("utf-8", errors="replace")

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    arrow = _ARROW_KEYS.get(seq)
    if arrow is not None:
        return arrow
    # Swallow the rest of unknown CSI sequences (``ESC [ 3 ~`` and friends).
    while seq is not None and not (b"@" <= seq <= b"~"):
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    return "UNKNOWN"
