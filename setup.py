"""
Installer configuration for sqlsession package.
"""

from setuptools import setup, find_packages

setup(
    name="sqlsession",
    version="1.0.0",
    description="Build SQLAlchemy session factories from XML configuration",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "docs"]),
    install_requires=[
        "sqlalchemy>=2.0.0",
        "cryptography>=39.0.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "postgresql": ["psycopg2-binary>=2.9.5"],
        "mysql": ["mysql-connector-python>=8.0.31"],
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "sqlsession=sqlsession.cli.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
