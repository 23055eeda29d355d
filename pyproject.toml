[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zkera"
version = "0.1.0"
description = "JSON-RPC client, ABI encoding and EIP-712 domain helpers for zkSync Era nodes"
requires-python = ">=3.10"
keywords = ["zksync", "ethereum", "json-rpc", "eip712", "abi", "layer2"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zkera"]

[tool.pytest.ini_options]
addopts = "-ra"
