"""Allows `python -m relay` to start the server."""

from relay.main import run

if __name__ == "__main__":
    run()
