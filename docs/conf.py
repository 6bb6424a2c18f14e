# Configuration file for the Sphinx documentation builder.
import os
import sys

sys.path.insert(0, os.path.abspath('../src'))

project = 'localcert'
copyright = '2025, localcert'
author = 'localcert'
release = '0.3.0'

extensions = ['sphinx.ext.autodoc', 'sphinx.ext.napoleon']

napoleon_google_docstring = False
napoleon_numpy_docstring = True

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
