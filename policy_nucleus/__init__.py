"""
.. include:: ../README.md
"""

__all__ = [
    "matcher",
    "selector",
    "conditions",
    "resources",
    "resource_list",
    "target",
    "policycore",
    "store",
    "compliance",
    "loader",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
