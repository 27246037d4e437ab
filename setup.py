from setuptools import setup, find_packages

setup(
    name="bookfinder",
    version="1.0.0",
    description="LLM-assisted book discovery backed by the Google Books catalog",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "duckdb>=0.9",
        "fastapi>=0.100",
        "openai>=1.0",
        "pydantic>=2.0",
        "requests>=2.28",
        "rich>=13.0",
        "typer>=0.9",
        "uvicorn>=0.20",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        'console_scripts': [
            'bookfinder=bookfinder.cli:app',
        ],
    },
)
