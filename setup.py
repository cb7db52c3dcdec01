from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="equireg",
    version="0.1.0",
    description="Equipment ownership and lifecycle registry with an HTTP API",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "httpx>=0.24",
    ],
    extras_require={
        "test": [
            "pytest>=7",
        ],
    },
    entry_points={
        "console_scripts": [
            "equireg=equireg.__main__:main",
        ],
    },
)
