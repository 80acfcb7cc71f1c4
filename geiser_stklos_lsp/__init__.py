"""Editor-side Geiser support for the STklos runtime.

This package provides:
- The command translator that turns editor requests into Scheme text.
- A structural scanner for module resolution, paren matching and definitions.
- Reply parsing and a synchronous editor session.
- A line-oriented REPL server hosting the runtime, and a pygls Language Server.
"""
