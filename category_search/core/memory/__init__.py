"""In-process collaborators for the search pipeline.

Used by the CLI against taxonomy files, and by tests.
"""
