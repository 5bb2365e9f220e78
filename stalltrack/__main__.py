import uvicorn

from stalltrack.core.config import settings


def main() -> None:
    uvicorn.run("stalltrack.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
