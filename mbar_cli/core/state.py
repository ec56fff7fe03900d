"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from mbar_cli.core.hooks import EventDispatcher
from mbar_cli.core.plugin import MediaByAspectRatio


@dataclass
class CLIState:
    """CLI runtime options, loaded configuration and the registered plugin."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    dispatcher: EventDispatcher
    plugin: Optional[MediaByAspectRatio] = None
    library_path: Optional[Path] = None
