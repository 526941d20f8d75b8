from dotenv import load_dotenv

load_dotenv()

import uvicorn  # noqa: E402  pylint: disable=wrong-import-position

from infrastructure.services import get_settings  # noqa: E402  pylint: disable=wrong-import-position
from server import server  # noqa: E402  pylint: disable=wrong-import-position

server_app = server.handler


if __name__ == "__main__":
    settings = get_settings()
    # One worker: the scheduler and the Telegram poller must not run twice
    uvicorn.run(server_app, host=settings.server.HOST, port=settings.server.PORT)
