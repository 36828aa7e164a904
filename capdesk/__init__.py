"""capdesk: desktop client coordinating recording sessions on an external backend."""

__version__ = "0.1.0"
