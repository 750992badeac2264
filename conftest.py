# conftest.py: root-level pytest configuration
import sys
import os

# Put the repository root on sys.path so the flat top-level packages
# (``core``, ``partition``, ``rules`` ...) import without an editable install.
sys.path.insert(0, os.path.dirname(__file__))

# Never collect tests from package __init__ files.
collect_ignore_glob = ["__init__.py"]
