[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tekken"
version = "0.1.1"
description = "Tekken byte-pair tokenizer with special tokens and audio token support"
requires-python = ">=3.10"
keywords = ["tokenizer", "bpe", "nlp", "audio", "mel", "tekken"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "numpy>=1.23",
    "regex>=2023.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
tekken-demo = "tekken.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["tekken"]

[tool.hatch.build.targets.sdist]
include = ["tekken", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
