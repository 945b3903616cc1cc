[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "draftdesk"
version = "0.1.0"
description = "Document life-cycle management for plain-text and Markdown editors: opening, saving, drafts, backups and recent-file bookmarks."
requires-python = ">=3.10"
dependencies = []
keywords = ["markdown", "editor", "documents", "autosave", "backup", "recent files"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors :: Text Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["draftdesk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
