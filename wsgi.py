"""WSGI entrypoint for production servers (gunicorn/uwsgi)."""

from dotenv import load_dotenv

from config import load_config
from registry_bench import create_app

load_dotenv()

app = create_app(load_config(dotenv=False))
