"""
Setup script for skillkeep.

skillkeep is the progress engine behind a skill-practice app. It serves
three roles:

1. Progress Store - Globally sequenced event log plus state snapshots
2. Review Scheduler - Expanding-interval spaced repetition with decay
3. Gem Rarity - Rewards tiered by skill depth, streaks and session accuracy

The 'skillkeep' command inspects and maintains a local progress database.
"""

from setuptools import find_packages, setup

setup(
    name="skillkeep",
    version="1.0.0",
    description="Learner progress persistence and spaced-repetition scheduling",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["skillkeep", "skillkeep.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.12.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "postgres": [
            "psycopg2-binary>=2.9.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "skillkeep=skillkeep.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition progress gamification",
)
