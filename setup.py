from setuptools import setup, find_packages

setup(
    name="issue-export",
    version="1.0.0",
    description="Export GitHub issues to CSV and translate them with an LLM",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9.0",
        "openai>=1.0.0",
        "rich>=13.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "csv-translate=issue_export.main:main",
            "issue-fetch=issue_export.cli:main",
        ],
    },
)
