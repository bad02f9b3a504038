"""Single-request HTTP responder with template token substitution."""

__version__ = '0.1.0'
