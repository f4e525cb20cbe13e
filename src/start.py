#!/usr/bin/env python
import sys
from pathlib import Path

# Add the src directory to Python path
src_dir = Path(__file__).parent
sys.path.insert(0, str(src_dir))


def main():
    """Start the application"""
    import uvicorn
    from stylegenie.config.settings import Settings
    from stylegenie.main import create_app
    from stylegenie.utils.logger import setup_logger

    settings = Settings()
    setup_logger(settings)

    print("=" * 50)
    print(f"Starting {settings.APP_NAME}")
    print(f"Environment: {'Development' if settings.DEBUG else 'Production'}")
    print(f"Host: {settings.HOST}:{settings.PORT}")
    print(f"Device storage: {Path(settings.DATA_DIR) / settings.STORAGE_FILE}")
    print(f"Store: {'hosted' if settings.store_configured else 'in-memory'}")
    print("=" * 50)

    create_directories(settings)

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


def create_directories(settings):
    """Create necessary directories"""
    directories = [Path(settings.DATA_DIR)]
    if settings.LOG_FILE:
        directories.append(Path(settings.LOG_FILE).parent)

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)
        print(f"✓ Directory ready: {directory}")


if __name__ == "__main__":
    main()
