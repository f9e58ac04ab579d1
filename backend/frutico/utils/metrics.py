from __future__ import annotations

"""
Best-effort StatsD/Datadog UDP counters and timers.

Usage (never raises):
  from frutico.utils.metrics import incr, timing_ms
  incr('webhook.signature_mismatch_total', tags={'provider': 'razorpay'})
  timing_ms('webhook.reconcile_ms', 12.5, tags={'outcome': 'processed'})

Env:
  METRICS_STATSD_ADDR = "host:port" (e.g., "127.0.0.1:8125"); unset disables
  METRICS_TAGS = "0" drops the Datadog-style tag suffix (|#key:val,...)
"""

import os
import socket
from typing import Dict, Optional

_ADDR = os.getenv("METRICS_STATSD_ADDR", "").strip()
_USE_TAGS = os.getenv("METRICS_TAGS", "1") not in ("0", "false", "False")
_SOCK: Optional[socket.socket] = None


def _get_sock() -> Optional[socket.socket]:
    global _SOCK
    if not _ADDR:
        return None
    if _SOCK is None:
        host, port = _ADDR.split(":", 1)
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect((host, int(port)))
        _SOCK = s
    return _SOCK


def _format_tags(tags: Optional[Dict[str, object]]) -> str:
    if not tags or not _USE_TAGS:
        return ""
    parts = [f"{str(k).replace(',', '_')}:{str(v).replace(',', '_')}" for k, v in tags.items() if k is not None]
    return "|#" + ",".join(parts) if parts else ""


def _send(line: str) -> None:
    try:
        s = _get_sock()
        if s is not None:
            s.send(line.encode("utf-8"))
    except (OSError, ValueError):
        # metrics must never break a request
        pass


def incr(name: str, value: int = 1, tags: Optional[Dict[str, object]] = None) -> None:
    _send(f"{name}:{int(value)}|c{_format_tags(tags)}")


def timing_ms(name: str, ms: float, tags: Optional[Dict[str, object]] = None) -> None:
    _send(f"{name}:{float(ms):.2f}|ms{_format_tags(tags)}")
