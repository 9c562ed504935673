"""
JSON API blueprints.

Each sub-package defines ``bp`` in its ``__init__`` and attaches its
routes by importing its ``routes`` module.  ``common`` holds the request
parsing and response helpers the blueprints share.
"""
