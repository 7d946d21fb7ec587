"""
Run the shopkeep API server.

    python -m shopkeep
"""
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from shopkeep.core.config import Settings
from shopkeep.core.logger import configure_app_logging


def main() -> None:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    settings = Settings.from_env()
    configure_app_logging(level=settings.log_level, log_to_file=settings.log_to_file)

    from shopkeep.app import create_app

    app = create_app(settings)

    # Printed, not logged: the key is handed to clients out of band
    print("=========================================")
    print(" API key for clients (x-api-key header):")
    print(f"   {app.state.services.secrets.api_key}")
    print("=========================================")

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
