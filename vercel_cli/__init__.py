"""vercel-api: one shell command per Vercel REST API operation.

Responses are printed to stdout as JSON. Failures print a single ``error:``
line to stderr and exit with status 1.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
