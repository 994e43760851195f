from setuptools import find_packages, setup

setup(
    name="deck-narrator-backend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "python-multipart>=0.0.9",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "lxml>=5.0",
        "openai>=1.30",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    python_requires=">=3.10",
    include_package_data=True,
    description="Backend package for Deck Narrator (slide extraction, scripts, notes and audio write-back)",
)
