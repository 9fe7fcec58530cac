"""Allow ``python -m dcs_dash``."""

from dcs_dash.cli import main

if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
