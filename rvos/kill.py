"""Send a kill signal to processes."""

import os
import signal
import sys

from .ulib import atoi

_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue
        try:
            os.kill(pid, _SIGNAL)
        except OSError:
            pass
    return 0