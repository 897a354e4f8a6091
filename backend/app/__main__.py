"""Run the Notes API with `python -m app`."""

from app.main import run

run()
