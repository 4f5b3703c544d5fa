"""Application entrypoint."""

from app.config import get_settings


def main() -> None:
    """Print how to serve the API with the active configuration.

    Returns
    -------
    None
        Prints the application import path and database URL.
    """
    settings = get_settings()
    print(f"{settings.app_name}: serving data from {settings.database_url}")
    print("Run with: uvicorn app.main:app --reload")


if __name__ == "__main__":
    main()
