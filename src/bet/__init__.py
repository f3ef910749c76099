"""
bet - jump between the projects scattered across your machine.

Indexes every project found under a set of configured roots and keeps the
index fresh across re-scans without losing your own annotations.

Stack:
- Python + pathspec (glob ignores)
- git CLI (project history and working tree status)
- JSON documents (persisted index)
- FastMCP (read-only access for AI agents)
"""

__version__ = "0.1.0"
