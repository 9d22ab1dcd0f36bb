[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pommikit"
version = "0.1.0"
description = "Web toolkit: password hashing, signed auth cookies, value binding, WSGI middleware and small utilities"
requires-python = ">=3.10"
keywords = ["wsgi", "middleware", "password-hashing", "argon2id", "pbkdf2", "etag", "auth", "binding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware",
    "Topic :: Software Development :: Libraries",
]
dependencies = [
    "cryptography",
    "werkzeug",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pommikit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
