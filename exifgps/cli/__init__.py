from exifgps.settings import read_settings

settings = read_settings()


if __name__ == "__main__":
    from exifgps.cli.base import cli

    cli()
