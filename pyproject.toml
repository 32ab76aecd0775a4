[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "schemastore"
version = "0.1.0"
description = "Typed row storage with parent/child relations on a DynamoDB-style table, plus a configurable provider front end."
requires-python = ">=3.10"
dependencies = []
keywords = ["dynamodb", "storage", "schema", "rows", "provider"]
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
    "Topic :: Database :: Front-Ends",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["schemastore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
