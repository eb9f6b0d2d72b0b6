from setuptools import setup, find_packages

setup(
    name="server-inventory",
    version="0.1.0",
    description="Server inventory CLI",
    long_description="Command line interface for managing a server inventory -- list/add/edit/delete VM records, etc.",
    long_description_content_type="text/markdown",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "aiohttp[speedups]>=3.10,<4",
        "loguru==0.7.2",
        "pydantic>=2.9,<3",
        "pydantic-settings>=2.0,<3",
        "rich>=13.0.0",
        "typer>=0.12.5",
    ],
    extras_require={
        "dev": [
            "pytest>=8",
            "pytest-asyncio>=0.23",
            "ruff",
            "wheel",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3.10",
    ],
    entry_points={
        "console_scripts": [
            "server-inventory=server_inventory.cli:app",
        ],
    },
)
