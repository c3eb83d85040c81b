import uvicorn

from backend.config import get_settings
from backend.log import setup_logger


# ----- SERVER ENTRY POINT -----
def run():
    settings = get_settings()
    setup_logger(settings.LOG_LEVEL)
    uvicorn.run(
        "backend.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
