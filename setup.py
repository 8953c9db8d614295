"""
setup.py for installing the finprox Python package.

The package sources live under python/:
    pip install -e .

Development tools (pytest, coverage, linters):
    pip install -e ".[dev]"
"""

from setuptools import find_packages, setup

setup(
    name="finprox",
    version="0.1.0",
    description="Constrained nonlinear optimization for finance: multi-period, robust and stochastic",
    package_dir={"": "python"},
    packages=find_packages(where="python"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "hypothesis>=6.0",
            "black>=23.0",
            "ruff>=0.1.0",
            "mypy>=1.0",
        ],
    },
)
