import uvicorn

from college_events.config import settings


def main():
    uvicorn.run("college_events.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
