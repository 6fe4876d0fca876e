import uvicorn

from pizzeria.core.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "pizzeria.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
