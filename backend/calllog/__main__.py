import uvicorn

from calllog.config import settings


def main() -> None:
    uvicorn.run("calllog.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
