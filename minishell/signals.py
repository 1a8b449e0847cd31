"""Signal set-up for the interactive shell."""

from __future__ import annotations

import signal
import sys
from types import FrameType

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platform without readline
    _readline = None  # type: ignore[assignment]

try:
    import termios as _termios
except ImportError:  # pragma: no cover - non-POSIX platform
    _termios = None  # type: ignore[assignment]


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError, OSError):
        return False


def _sigint_handler(signum: int, frame: FrameType | None) -> None:
    """Move to a fresh line and show the prompt again."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    if _readline is not None and _stdin_is_tty():
        _readline.redisplay()


def _hide_control_echo() -> None:
    """Stop the terminal from echoing control characters such as ``^C``."""
    if _termios is None:
        return
    try:
        fd = sys.stdin.fileno()
        attrs = _termios.tcgetattr(fd)
    except (AttributeError, ValueError, OSError, _termios.error):
        return
    echoctl = getattr(_termios, "ECHOCTL", 0)
    attrs[3] &= ~echoctl
    try:
        _termios.tcsetattr(fd, _termios.TCSANOW, attrs)
    except (OSError, _termios.error):
        pass


def install_signal_handlers() -> None:
    """Catch Ctrl-C at the prompt, ignore SIGQUIT and hide ``^C`` echo."""
    signal.signal(signal.SIGINT, _sigint_handler)
    signal.siginterrupt(signal.SIGINT, False)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    _hide_control_echo()