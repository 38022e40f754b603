"""mockquery — in-memory emulation of provider query functions.

Query predicates written against a database provider's function surface
(`functions.like(...)`) are rewritten to run against in-memory data, so code
that builds queries can be exercised without a database.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
