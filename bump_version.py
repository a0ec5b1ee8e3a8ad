#!/usr/bin/env python3
"""
Version Bumping Utility for installer-menu

Usage:
    python bump_version.py [patch|minor|major]

Examples:
    python bump_version.py patch    # 1.0.0 -> 1.0.1
    python bump_version.py minor    # 1.0.0 -> 1.1.0
    python bump_version.py major    # 1.0.0 -> 2.0.0
"""

import sys
import re
from pathlib import Path

ROOT = Path(__file__).parent
VERSION_FILE = ROOT / "VERSION"
PACKAGE_INIT = ROOT / "src" / "installer_menu" / "__init__.py"

def get_current_version():
    """Extract current version from VERSION file"""
    with open(VERSION_FILE, "r", encoding="utf-8") as f:
        return f.read().strip()

def bump_version(current_version, bump_type):
    """Calculate new version based on bump type"""
    major, minor, patch = map(int, current_version.split("."))

    if bump_type == "major":
        major += 1
        minor = 0
        patch = 0
    elif bump_type == "minor":
        minor += 1
        patch = 0
    elif bump_type == "patch":
        patch += 1
    else:
        raise ValueError(f"Invalid bump type: {bump_type}")

    return f"{major}.{minor}.{patch}"

def update_version_in_package(new_version):
    """Update VERSION constant in the package __init__"""
    content = PACKAGE_INIT.read_text(encoding="utf-8")
    updated, count = re.subn(r'^VERSION = "[^"]*"$', f'VERSION = "{new_version}"', content, flags=re.MULTILINE)
    if count != 1:
        raise ValueError(f"VERSION constant not found in {PACKAGE_INIT}")
    PACKAGE_INIT.write_text(updated, encoding="utf-8")

def update_version_file(new_version):
    """Update VERSION file"""
    with open(VERSION_FILE, "w") as f:
        f.write(new_version + "\n")

def main():
    if len(sys.argv) != 2:
        print("Usage: python bump_version.py [patch|minor|major]")
        print("\nExamples:")
        print("  python bump_version.py patch    # 1.0.0 -> 1.0.1")
        print("  python bump_version.py minor    # 1.0.0 -> 1.1.0")
        print("  python bump_version.py major    # 1.0.0 -> 2.0.0")
        sys.exit(1)

    bump_type = sys.argv[1].lower()
    if bump_type not in ["patch", "minor", "major"]:
        print(f"Error: Invalid bump type \"{bump_type}\". Use patch, minor, or major.")
        sys.exit(1)

    try:
        current_version = get_current_version()
        print(f"Current version: {current_version}")

        new_version = bump_version(current_version, bump_type)
        print(f"New version: {new_version}")

        print("Updating VERSION file...")
        update_version_file(new_version)
        print("Updating package version...")
        update_version_in_package(new_version)

        print(f"[OK] Version bumped from {current_version} to {new_version}")
        print("\nNext steps:")
        print("1. Run the tests: pytest")
        print("2. Commit changes: git add . && git commit -m \"Bump version to {}\"".format(new_version))
        print("3. Create tag: git tag v{}".format(new_version))
        print("4. Push changes: git push && git push --tags")

    except Exception as e:
        print(f"[X] Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
