"""Allow running as python -m opgate."""

from opgate.cli import main

if __name__ == "__main__":
    main()
