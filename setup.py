"""Setup file for the idlmap package."""
from setuptools import find_packages, setup

setup(
    name="idlmap",
    version="0.1.0",
    description="Map IDL schema types to native types and serde combinators",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "idlmap=idlmap.cli.main:main",
        ],
    },
)
