import os
from setuptools import setup, find_packages

# Read version from _version.py (exec, not import — package isn't installed yet)
version_file = os.path.join(os.path.dirname(__file__), "gitsemver", "_version.py")
with open(version_file) as f:
    exec(f.read())

setup(
    name="git-semver",
    version=get_pip_version() if "get_pip_version" in locals() else "0.0.0",
    description="Generate a semantic versioning compliant tag for your HEAD commit",
    long_description=open("README.md", encoding="utf-8").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "git-semver=gitsemver.cli:main",
        ],
    },
    install_requires=[
        "semver>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Software Development :: Version Control :: Git",
    ],
    python_requires=">=3.8",
)
