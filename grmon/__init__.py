"""grmon: live terminal viewer for goroutine stack dumps.

Fetches the verbose goroutine dump (``/debug/pprof/goroutine?debug=2``)
from a running Go process, or replays a saved capture, and shows every
goroutine in a sortable, filterable Rich table that refreshes on a timer.
Pausing freezes the view so individual stacks can be expanded.
"""

__version__ = "0.2.0"
__description__ = "Live terminal viewer for goroutine stack dumps"

from grmon.core.engine import LiveStateEngine
from grmon.core.parser import parse_dump
from grmon.monitor.projection import ViewProjection

__all__ = ["LiveStateEngine", "ViewProjection", "parse_dump", "__version__"]
