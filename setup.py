# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Setuptools installer for the file upload server."""

from os.path import dirname, join

from setuptools import find_packages, setup


def read(filename):
    """Return the whitespace-stripped content of `filename`."""
    path = join(dirname(__file__), filename)
    with open(path, "r") as fin:
        return fin.read().strip()


setup(
    name="fileupload",
    version="1.0.0",
    license="AGPLv3",
    description="Authenticated multipart file upload service backed by PostgreSQL",
    long_description=read("README.rst"),
    packages=find_packages(
        where="src",
        exclude=["tests", "tests.*"],
    ),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "asyncpg",
        "fastapi",
        "pydantic>=2",
        "python-dotenv",
        "python-json-logger>=3.1",
        "python-multipart",
        "sqlalchemy[asyncio]>=2",
        "starlette",
        "structlog",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "httpx",
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "upload-apiserver = uploadapiserver.main:run",
        ]
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: GNU Affero General Public License v3",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
)
