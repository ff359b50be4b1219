[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "persondir"
version = "1.0.0"
description = "REST service that stores people and enriches new entries with age, gender and nationality estimated from the first name."
requires-python = ">=3.10"
keywords = ["rest", "api", "fastapi", "sqlalchemy", "people", "directory"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: FastAPI",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "fastapi>=0.100",
    "pydantic>=2.0",
    "sqlalchemy>=2.0",
    "httpx>=0.24",
    "python-dotenv>=1.0",
    "uvicorn>=0.22",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "httpx>=0.24",
    "respx>=0.20",
]

[project.scripts]
persondir-server = "persondir.app:main"

[tool.hatch.build.targets.wheel]
packages = ["persondir"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
