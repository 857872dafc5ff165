"""grmon monitor — view projection, rendering and the interactive session.

Modules
-------
projection
    ``ViewProjection`` applies sort, filter and cursor state to the
    current goroutine records.
renderer
    ``MonitorRenderer`` turns a ``MonitorView`` into Rich renderables.
session
    ``MonitorSession`` runs the single-threaded command loop that ties
    the engine, projection and renderer together.
workers
    ``RefreshTimer`` and ``KeyReader`` post commands to the session.
"""
