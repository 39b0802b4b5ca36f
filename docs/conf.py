"""Sphinx configuration for Contact Manager API documentation."""

import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath(".."))

project = "Contact Manager API"
copyright = f"{datetime.now().year}, Contact Manager"
author = "Contact Manager Team"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

autodoc_member_order = "bysource"
napoleon_google_docstring = True

exclude_patterns: list[str] = ["_build"]

html_theme = "alabaster"
