[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "legalbot"
version = "0.1.0"
description = "Chat bot that forwards user claims to a language model, keeps the answers and sends them back over Telegram."
requires-python = ">=3.10"
dependencies = []
keywords = ["telegram", "bot", "chat", "openrouter", "rate-limiter", "webhook"]
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
    "Topic :: Communications :: Chat",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
legalbot-bot = "legalbot.server:bot_main"
legalbot-prompt = "legalbot.server:prompt_main"

[tool.hatch.build.targets.wheel]
packages = ["legalbot"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
