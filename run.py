"""Development server entrypoint for the insertion API."""
from dotenv import load_dotenv

# Load .env before reading configuration
load_dotenv()

from config import load_config
from registry_bench import create_app

cfg = load_config(dotenv=False)
app = create_app(cfg)

if __name__ == '__main__':
    app.run(debug=True, port=cfg.api.port)
