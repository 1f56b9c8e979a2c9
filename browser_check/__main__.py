"""
Allow running the service with ``python -m browser_check``.
"""

from .web.run import main

if __name__ == "__main__":
    main()
