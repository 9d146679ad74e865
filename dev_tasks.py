#!/usr/bin/env python3
"""
Development tasks for patchql.

    python dev_tasks.py test -k strawberry   # extra arguments go to pytest
    python dev_tasks.py example              # serve examples/main.py
"""

import os
import shutil
import subprocess
import sys

SOURCES = ["patchql", "tests", "examples"]


def run(*args, check=True):
    print("Running:", " ".join(args))
    return subprocess.run(args, check=check).returncode == 0


def clean(*_):
    for path in ["build", "dist", ".pytest_cache", ".mypy_cache", "htmlcov", ".coverage"]:
        if os.path.isdir(path):
            shutil.rmtree(path, ignore_errors=True)
        elif os.path.exists(path):
            os.remove(path)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _files in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)


def format_code(*_):
    run("black", *SOURCES)
    run("isort", *SOURCES)


def lint(*_):
    ok = run("mypy", "patchql", check=False)
    ok = run("flake8", *SOURCES, check=False) and ok
    if not ok:
        sys.exit(1)


def test(*pytest_args):
    run(sys.executable, "-m", "pytest", "--cov=patchql", "--cov-report=term-missing", *pytest_args)


def example(*_):
    run(sys.executable, os.path.join("examples", "main.py"))


def build(*_):
    clean()
    run(sys.executable, "-m", "build")
    run(sys.executable, "-m", "twine", "check", *[os.path.join("dist", n) for n in os.listdir("dist")])


def install_dev(*_):
    run(sys.executable, "-m", "pip", "install", "-e", ".[dev,test,examples]")


TASKS = {
    "clean": clean,
    "format": format_code,
    "lint": lint,
    "test": test,
    "example": example,
    "build": build,
    "install-dev": install_dev,
}


def main():
    if len(sys.argv) < 2 or sys.argv[1] not in TASKS:
        print("Usage: python dev_tasks.py <task> [args...]")
        print("Tasks:", ", ".join(TASKS))
        sys.exit(1)
    TASKS[sys.argv[1]](*sys.argv[2:])


if __name__ == "__main__":
    main()
