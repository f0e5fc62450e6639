[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "guardagent"
version = "0.1.0"
description = "A guardrail proxy for OpenAI-compatible chat endpoints that blocks prompts, replies and uploads matching keyword or regex rules."
requires-python = ">=3.10"
keywords = ["llm", "guardrail", "proxy", "content-filter", "openai", "moderation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Text Processing :: Filters",
]
dependencies = [
    "pyyaml>=6.0",
    "flask>=2.2",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
guardagent = "guardagent.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["guardagent"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
