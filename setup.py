from setuptools import find_namespace_packages, setup

setup(
    name="buildjob-api",
    version="0.1.0",
    packages=find_namespace_packages(
        include=[
            "buildjob_common",
            "buildjob_common.*",
            "buildjob_logs",
            "buildjob_logs.*",
            "buildjob_deploy",
            "buildjob_deploy.*",
            "buildjob_server",
            "buildjob_server.*",
            "buildjob_client",
            "buildjob_client.*",
            "buildjob_admin",
            "buildjob_admin.*",
        ]
    ),
    install_requires=[
        "requests>=2.31.0",
        "fastapi>=0.104.0",
        "pydantic>=2.0",
        "uvicorn>=0.24.0",
        "click>=8.1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-xdist>=3.3.0",
            "httpx>=0.25.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "buildjob=buildjob_client.cli:main",
            "buildjob-admin=buildjob_admin.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
