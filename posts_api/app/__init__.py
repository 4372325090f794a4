"""
Application package for the Posts API.

The package is organised by layer: ``core`` holds configuration,
logging, errors, security and the in-memory store; ``schemas`` holds
the request and response models; ``services`` holds business logic;
and ``api`` exposes the HTTP routes.  ``main.create_app`` assembles
them into a FastAPI application.
"""
