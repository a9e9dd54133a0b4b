"""Resource caps for gpg child processes.

`apply_resource_limits` runs as `preexec_fn` in the forked child, so gpg
starts with its address space and CPU time bounded. A hanging gpg is
handled by the command timeout instead; CPU time does not grow while gpg
waits on input.

Environment overrides:
  - PUBLISHER_RLIMIT_AS_BYTES: integer bytes (0 or negative disables the cap)
  - PUBLISHER_RLIMIT_CPU_SECONDS: integer seconds (0 or negative keeps the default)

Does nothing on Windows, which has no `resource` module.
"""

import logging
import os
import sys
from typing import Optional

logger = logging.getLogger(__name__)

_GIGABYTE = 1024 * 1024 * 1024


def _env_limit(name: str, default: int, allow_disable: bool) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    value = int(raw)
    if value > 0:
        return value
    return None if allow_disable else default


def gpg_limits() -> dict[str, Optional[int]]:
    """Soft limits keyed by `resource` constant name; None means uncapped."""
    return {
        "RLIMIT_AS": _env_limit("PUBLISHER_RLIMIT_AS_BYTES", _GIGABYTE, allow_disable=True),
        "RLIMIT_CPU": _env_limit("PUBLISHER_RLIMIT_CPU_SECONDS", 30, allow_disable=False),
    }


def apply_resource_limits() -> None:
    if sys.platform == "win32":
        return

    try:
        import resource

        for rlimit_name, soft in gpg_limits().items():
            if soft is not None:
                resource.setrlimit(getattr(resource, rlimit_name), (soft, resource.RLIM_INFINITY))
    except (ImportError, ValueError, OSError) as exc:
        logger.warning("gpg runs without resource limits: %s", exc)
