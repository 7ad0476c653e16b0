"""Sphinx configuration for the bitgrid API docs (``sphinx-build docs/source docs/build``)."""
import sys
from datetime import date
from pathlib import Path

# autodoc imports the package straight from the src/ layout
SRC = Path(__file__).resolve().parents[2] / "src"
sys.path.insert(0, str(SRC))

project = "bitgrid"
author = "bitgrid developers"
release = "0.1.0"
version = ".".join(release.split(".")[:2])
copyright = f"{date.today():%Y}, {author}"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx.ext.doctest",
    "sphinx.ext.viewcode",
    "sphinx_autodoc_typehints",
    "myst_parser",
    "sphinx_copybutton",
]

# NumPy style docstrings throughout
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_use_rtype = False

autosummary_generate = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}

# The Examples sections of the utils modules run under `make doctest`
doctest_global_setup = "from bitgrid import BitGrid, PillowImageSource, Rect"

source_suffix = {".rst": "restructuredtext", ".md": "markdown"}
templates_path = ["_templates"]
exclude_patterns = ["_build"]

html_theme = "furo"
html_title = f"bitgrid {release}"
html_static_path = ["_static"]

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "scipy": ("https://docs.scipy.org/doc/scipy/", None),
    "shapely": ("https://shapely.readthedocs.io/en/stable/", None),
    "rasterio": ("https://rasterio.readthedocs.io/en/stable/", None),
    "PIL": ("https://pillow.readthedocs.io/en/stable/", None),
}
