"""
Trace Working - find the last commit where a file still worked.

Walks the history back from HEAD, checks out every commit that contains the
target file and runs a check command against it until one passes.
"""

__version__ = "0.1.0"
