"""Marathon API client.

Typed client for the Marathon launch queue and pod instance endpoints.
"""

__version__ = "0.1.0"
