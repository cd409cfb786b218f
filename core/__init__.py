"""Core module - format-neutral configuration, errors and observability.

Nothing in here knows about a particular record format; format-specific
logic belongs in /parsers/.
"""

__version__ = "1.0.0"
