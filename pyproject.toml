[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nfskit"
version = "0.1.0"
description = "XDR encoding, file metadata and an inode-to-path registry for building NFS servers"
requires-python = ">=3.10"
dependencies = []
keywords = ["nfs", "xdr", "rpc", "inode", "filesystem"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nfskit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
