"""
Setup script for Tributary - a pure Python package.
"""

from setuptools import find_packages
from setuptools import setup

LIBRARY = "tributary"

__version__ = "unknown"

# Read version and metadata
with open(f"{LIBRARY}/__version__.py", "r", encoding="UTF8") as v:
    exec(v.read())

with open("README.md", "r", encoding="UTF8") as f:
    long_description = f.read()

# Setup configuration
setup(
    name=LIBRARY,
    version=__version__,
    description="Optimization selection and fail-open rewriting for dataset pipelines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=[LIBRARY, f"{LIBRARY}.*"]),
    python_requires=">=3.11",
    install_requires=[
        "cityhash",
        "orjson",
    ],
    extras_require={
        "dotenv": ["python-dotenv"],
        "test": ["pytest", "rich"],
    },
    zip_safe=False,
)
