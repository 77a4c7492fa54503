"""Smart Restore - FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic response models.
validation
    Checks applied to an upload before any processing happens.
"""
