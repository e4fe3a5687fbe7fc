"""Setup configuration for the Guildcord Discord bot framework."""

from setuptools import setup, find_packages

setup(
    name="guildcord",
    version="0.0.1",
    description="Guild-scoped prefix command framework for Discord bots",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.4",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "guildcord=guildcord.main:main",
        ],
    },
)
