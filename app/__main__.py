import uvicorn

from app.config import settings


def main() -> None:
    """Run the board with uvicorn on the configured host and port."""
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
