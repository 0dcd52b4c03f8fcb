from setuptools import setup, find_packages

setup(
    name="coursereview",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt>=4.0.1,<4.1",
        "python-multipart",
        "pydantic[email]>=2",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
        "boto3",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
