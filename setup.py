from setuptools import find_packages, setup

setup(
    name="mapperf",
    version="0.1.0",
    description="Benchmarks for list indexing and dict lookup access patterns",
    python_requires=">=3.9",
    packages=find_packages(include=["mapperf", "mapperf.*"]),
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "mapperf=mapperf.cli:main",
        ],
    },
)
