"""Allow ``python -m release_train``."""

from release_train.cli.main import app

app()
