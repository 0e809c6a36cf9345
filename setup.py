from __future__ import annotations

from setuptools import find_packages, setup

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

INSTALL_REQUIRES = [
    "fastapi>=0.110",
    "uvicorn>=0.27",
    "pydantic>=2.5",
    "loguru>=0.7",
    "feedparser>=6.0",
    "requests>=2.31",
    "beautifulsoup4>=4.12",
    "python-dateutil>=2.8",
    "SQLAlchemy>=2.0",
    "python-dotenv>=1.0",
    "tomli-w>=1.0",
    "rapidfuzz>=3.0",
]

TEST_REQUIRES = [
    "pytest>=7.4",
    "httpx>=0.25",
    "hypothesis>=6.90",
]

if __name__ == "__main__":
    setup(
        name="superfacts",
        version=PROJECT_VERSION,
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["config", "config.*", "src", "src.*", "superfacts", "superfacts.*"]),
        py_modules=["main"],
        install_requires=INSTALL_REQUIRES,
        extras_require={"test": TEST_REQUIRES},
        entry_points={"console_scripts": ["superfacts=main:main"]},
    )
