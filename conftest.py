"""Make the ``src`` package importable when tests run from a plain checkout."""
import os
import sys

repository_root = os.path.abspath(os.path.dirname(__file__))
if repository_root not in sys.path:
    sys.path.insert(0, repository_root)
