import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from typespeed.application import create_app
from typespeed.config import load_settings

settings = load_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

app = create_app(settings)


if __name__ == "__main__":
    logging.info("WebSocket server started on http://%s:%s", settings.host, settings.port)
    logging.info("Client available on http://%s:%s/", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
