"""
Entry point for ``python -m github_parts``
"""

from .server import main

if __name__ == "__main__":
    main()
