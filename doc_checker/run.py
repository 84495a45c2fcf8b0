"""
Quick runner for Smart Doc Checker

Usage:
    python -m doc_checker.run
"""
import os

import uvicorn


def main():
    port = int(os.getenv("PORT", "8000"))
    print("Starting Smart Doc Checker...")
    print(f"API docs: http://localhost:{port}/docs")
    uvicorn.run("doc_checker.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
