from setuptools import setup, find_packages

setup(
    name="serene-api",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"serene": ["db/seed/*.yaml"]},
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]",
        "aiosqlite",
        "asyncpg",
        "pydantic[email]",
        "pydantic-settings",
        "python-dotenv",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<4.1",
        "python-multipart",
        "pyyaml",
        "stripe>=8",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
)
