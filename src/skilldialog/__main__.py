"""skill-dialog CLI bootstrap."""

from __future__ import annotations

from skilldialog.cli.app import app

if __name__ == "__main__":
    app()
