from setuptools import find_namespace_packages, setup

setup(
    name="musigraph",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", exclude=["musigraph_tests*"]),
    python_requires=">=3.10",
    install_requires=[
        "dagster",
        "aiohttp",
        "certifi",
        "pydantic>=2",
        "python-dotenv",
        "polars",
        "cachetools",
    ],
    extras_require={"dev": ["dagster-webserver", "pytest", "pytest-asyncio"]},
)
