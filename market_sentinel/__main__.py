import uvicorn

from market_sentinel.config import settings


def main() -> None:
    uvicorn.run(
        "market_sentinel.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
