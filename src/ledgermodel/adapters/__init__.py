"""
Web adapters for ledgermodel.

Import the framework-specific module directly, e.g.
``from ledgermodel.adapters.fastapi import include_entity_set``.
"""
