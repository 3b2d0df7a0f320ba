#!/usr/bin/env python3
"""Development server startup script."""

import os
import subprocess


def main():
    os.environ.setdefault("PYTHONPATH", "src")
    # Watch the wizard in a real window while developing
    os.environ.setdefault("FREIGHT_HEADLESS", "false")

    cmd = ["uvicorn", "main:app", "--app-dir", "src", "--reload", "--host", "0.0.0.0", "--port", "8080", "--log-level", "debug"]

    print("Starting development server...")
    print(f"Command: {' '.join(cmd)}")
    print("Server at: http://localhost:8080")
    print("API docs at: http://localhost:8080/docs")
    print(f"Freight browser headless: {os.environ['FREIGHT_HEADLESS']}")
    print("-" * 50)

    subprocess.run(cmd)


if __name__ == "__main__":
    main()
