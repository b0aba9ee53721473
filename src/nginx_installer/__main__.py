"""Entry point for ``python -m nginx_installer``."""

from nginx_installer.cli.main import main


if __name__ == "__main__":
    main()
