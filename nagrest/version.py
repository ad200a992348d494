"""
Version
-------

Defines the version of the library.

.. autodata:: nagrest.version.__version__
"""

__version__ = "1.0.0"
"""The current version."""

name = "nagrest"
