"""Business logic services.

Import from the submodules directly (``services.document_service``,
``services.json_patch``, ...); schemas import helpers from this package, so
it stays free of eager imports.
"""
