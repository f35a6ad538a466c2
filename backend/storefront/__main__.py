import uvicorn

from storefront.config import settings
from storefront.main import create_app


def main():
    uvicorn.run(create_app(settings), host=settings.APP_HOST, port=settings.APP_PORT)


if __name__ == "__main__":
    main()
