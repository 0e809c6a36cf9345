"""
Main SuperFacts package.

Holds the functional modules of the site backend: collectors, ads, SEO
feeds, storage, HTTP serving and utilities.
"""

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

__version__ = PROJECT_VERSION
__description__ = "French news aggregation backend with ad serving and SEO feeds"

__package_info__ = {
    "name": "superfacts",
    "version": __version__,
    "description": __description__,
    "author": "SuperFacts Team",
    "license": "MIT",
    "python_requires": PYTHON_REQUIRES_SPECIFIER,
}

__all__ = ["__version__", "__package_info__"]
