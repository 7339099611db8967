"""Entry point: delegates to the CLI app (renew, fetch-code, validate-config)."""

from rich.traceback import install

from spaceauth_renewer.cli import app


def run() -> None:
    install(show_locals=False, max_frames=5, word_wrap=True)
    app()


if __name__ == "__main__":
    run()
