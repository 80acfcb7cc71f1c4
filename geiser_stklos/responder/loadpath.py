"""Resolution of load-file requests against the responder's load path."""

from __future__ import annotations

import os
from typing import Optional

from geiser_stklos.responder.context import ResponderContext


def resolve(context: ResponderContext, filename: str) -> Optional[str]:
    """First `prefix/filename` on the load path that is an existing file.

    Absolute names are taken as they are.
    """
    if os.path.isabs(filename):
        return filename if os.path.isfile(filename) else None
    for prefix in context.load_path:
        candidate = os.path.join(prefix, filename)
        if os.path.isfile(candidate):
            return candidate
    return None


def add_path(context: ResponderContext, path: str) -> bool:
    """Put directory `path` in front of the load path; False if it is not one."""
    if not os.path.isdir(path):
        return False
    if path in context.load_path:
        context.load_path.remove(path)
    context.load_path.insert(0, path)
    return True
