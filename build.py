"""
Build script for creating a standalone executable using PyInstaller.

The executable lets the cleanup run on file servers that have no Python
installation.
"""

import PyInstaller.__main__  # type: ignore

PyInstaller.__main__.run(["main.py", "--onefile", "--name=cloudprep"])
