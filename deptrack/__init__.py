"""deptrack — audit Go dependency versions across many GitHub repositories.

Fetches each repository's vendor/vendor.json or go.mod, parses the declared
dependencies and reports which versions are used by which repositories.
"""

__version__ = "0.1.0"
