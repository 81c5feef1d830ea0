# src/__init__.py
"""realtycrm: client layer for the real-estate CRM backend."""
