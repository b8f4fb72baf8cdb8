"""Allow ``python -m depcache``."""

from .app.cli.main import main

if __name__ == "__main__":
    main()
