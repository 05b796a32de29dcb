import uvicorn

from tshort.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "tshort.main:app",
        host=settings.LISTEN_HOST,
        port=settings.LISTEN_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
