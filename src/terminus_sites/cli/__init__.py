"""Click-based command-line interface for terminus-sites."""

from __future__ import annotations
